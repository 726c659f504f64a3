"""Tests for the serverless handler."""

import asyncio
from unittest.mock import AsyncMock, patch

from gameqa.agents.reporter_agent import ReporterAgent
import gameqa.handler as handler_module
from gameqa.handler import handler

from conftest import GAME_URL


def _error_report():
    return ReporterAgent().error_result("s1", GAME_URL, "Target page crashed")


class TestHandler:
    def test_string_event(self):
        report = _error_report()
        with patch("gameqa.handler.run", AsyncMock(return_value=report)) as run_mock:
            result = asyncio.run(handler(GAME_URL))

        assert result is report
        run_mock.assert_awaited_once_with(GAME_URL, None, llm=None, store=None)

    def test_dict_event_with_options(self, store):
        report = _error_report()
        llm = object()
        with patch("gameqa.handler.run", AsyncMock(return_value=report)) as run_mock:
            asyncio.run(handler({"url": GAME_URL, "options": {"timeout": 30}}, None, llm=llm, store=store))

        run_mock.assert_awaited_once_with(GAME_URL, {"timeout": 30}, llm=llm, store=store)

    def test_invalid_url_becomes_error_report(self):
        with patch("gameqa.handler.run", AsyncMock(side_effect=ValueError("Invalid game URL: not-a-url"))):
            result = asyncio.run(handler({"url": "not-a-url"}))

        assert result.status == "error"
        assert result.session_id == "error"
        assert result.game_url == "not-a-url"
        assert result.issues == ["Test execution failed: Invalid game URL: not-a-url"]

    def test_invalid_url_without_mocks(self):
        with patch("gameqa.default_language_model", return_value=None):
            result = asyncio.run(handler("not-a-url"))

        assert result.status == "error"
        assert result.session_id == "error"
        assert "Invalid game URL" in result.issues[0]

    def test_bad_options_become_error_report(self):
        with patch("gameqa.default_language_model", return_value=None):
            result = asyncio.run(handler({"url": GAME_URL, "options": {"timeout": -1}}))

        assert result.status == "error"
        assert result.session_id == "error"

    def test_unsupported_event(self):
        result = asyncio.run(handler(42))

        assert result.status == "error"
        assert "Unsupported event type" in result.issues[0]

    def test_test_game_wraps_run(self):
        report = _error_report()
        with patch("gameqa.handler.run", AsyncMock(return_value=report)) as run_mock:
            result = asyncio.run(handler_module.test_game(GAME_URL, {"timeout": 20}))

        assert result is report
        run_mock.assert_awaited_once_with(GAME_URL, {"timeout": 20})
