"""Tests for error classification and retry policies."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel, ValidationError

from gameqa.utils.errors import ConfigurationError, ErrorKind, GameQAError, classify_error, describe_error
from gameqa.utils.retry import RETRY_POLICIES, RetryPolicy, get_policy, retry_with_classification


class TestClassifyError:
    def test_gameqa_error_keeps_its_kind(self):
        assert classify_error(GameQAError(ErrorKind.LLM_FAILURE, "bad reply")) is ErrorKind.LLM_FAILURE

    def test_configuration_error_is_validation(self):
        assert classify_error(ConfigurationError("missing model")) is ErrorKind.VALIDATION_ERROR

    def test_timeouts(self):
        assert classify_error(asyncio.TimeoutError()) is ErrorKind.TIMEOUT
        assert classify_error(TimeoutError("slow")) is ErrorKind.TIMEOUT

    def test_connection_error_is_network(self):
        assert classify_error(ConnectionRefusedError("refused")) is ErrorKind.NETWORK_ERROR

    def test_validation_errors(self):
        class Model(BaseModel):
            value: int

        with pytest.raises(ValidationError) as exc_info:
            Model(value="not a number")

        assert classify_error(exc_info.value) is ErrorKind.VALIDATION_ERROR
        assert classify_error(ValueError("bad")) is ErrorKind.VALIDATION_ERROR

    def test_unknown_is_fatal(self):
        assert classify_error(RuntimeError("boom")) is ErrorKind.FATAL

    def test_describe_error_falls_back_to_type_name(self):
        assert describe_error(RuntimeError("boom")) == "boom"
        assert describe_error(KeyError()) == "KeyError"


class TestRetryPolicy:
    def test_policy_table(self):
        assert get_policy(ErrorKind.BROWSER_CRASH).max_retries == 2
        assert get_policy(ErrorKind.API_FAILURE).max_retries == 2
        assert get_policy(ErrorKind.NETWORK_ERROR).max_retries == 3
        assert get_policy(ErrorKind.TIMEOUT).max_retries == 1
        assert get_policy(ErrorKind.LLM_FAILURE).max_retries == 2
        for kind in (ErrorKind.VALIDATION_ERROR, ErrorKind.SCREENSHOT_FAILURE, ErrorKind.FATAL):
            assert get_policy(kind).max_retries == 0
        assert set(RETRY_POLICIES) == set(ErrorKind)

    def test_delays(self):
        assert RETRY_POLICIES[ErrorKind.BROWSER_CRASH].delay_for(0) == 5.0
        assert RETRY_POLICIES[ErrorKind.BROWSER_CRASH].delay_for(1) == 5.0
        assert RETRY_POLICIES[ErrorKind.API_FAILURE].delay_for(0) == 2.0
        assert RETRY_POLICIES[ErrorKind.API_FAILURE].delay_for(2) == 8.0
        assert RetryPolicy().delay_for(3) == 0.0


class TestRetryWithClassification:
    def test_returns_first_success(self, no_sleep):
        op = AsyncMock(side_effect=[RuntimeError("crash"), "loaded"])

        result = asyncio.run(retry_with_classification(op, ErrorKind.BROWSER_CRASH))

        assert result == "loaded"
        assert op.await_count == 2
        no_sleep.assert_awaited_once_with(5.0)

    def test_browser_crash_retried_at_most_twice(self, no_sleep):
        original = RuntimeError("crash")
        op = AsyncMock(side_effect=original)

        with pytest.raises(GameQAError) as exc_info:
            asyncio.run(retry_with_classification(op, ErrorKind.BROWSER_CRASH))

        assert op.await_count == 3
        assert exc_info.value.kind is ErrorKind.BROWSER_CRASH
        assert exc_info.value.__cause__ is original
        assert [c.args[0] for c in no_sleep.await_args_list] == [5.0, 5.0]

    def test_validation_error_never_retried(self, no_sleep):
        op = AsyncMock(side_effect=ValueError("bad input"))

        with pytest.raises(GameQAError) as exc_info:
            asyncio.run(retry_with_classification(op, ErrorKind.VALIDATION_ERROR))

        assert op.await_count == 1
        assert exc_info.value.kind is ErrorKind.VALIDATION_ERROR
        no_sleep.assert_not_awaited()

    def test_exhausted_gameqa_error_is_reraised_unchanged(self, no_sleep):
        error = GameQAError(ErrorKind.LLM_FAILURE, "unparseable")
        op = AsyncMock(side_effect=error)

        with pytest.raises(GameQAError) as exc_info:
            asyncio.run(retry_with_classification(op, ErrorKind.LLM_FAILURE))

        assert exc_info.value is error
        assert op.await_count == 3
        assert [c.args[0] for c in no_sleep.await_args_list] == [2.0, 4.0]

    def test_other_kind_propagates_immediately(self, no_sleep):
        op = AsyncMock(side_effect=GameQAError(ErrorKind.FATAL, "broken"))

        with pytest.raises(GameQAError) as exc_info:
            asyncio.run(retry_with_classification(op, ErrorKind.TIMEOUT))

        assert exc_info.value.kind is ErrorKind.FATAL
        assert op.await_count == 1

    def test_max_retries_lowers_budget(self, no_sleep):
        op = AsyncMock(side_effect=RuntimeError("crash"))

        with pytest.raises(GameQAError):
            asyncio.run(retry_with_classification(op, ErrorKind.NETWORK_ERROR, max_retries=1))

        assert op.await_count == 2

    def test_max_retries_never_raises_budget(self, no_sleep):
        op = AsyncMock(side_effect=TimeoutError())

        with pytest.raises(GameQAError):
            asyncio.run(retry_with_classification(op, ErrorKind.TIMEOUT, max_retries=10))

        assert op.await_count == 2
