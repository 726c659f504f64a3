"""Tests for the Ollama language model adapter."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from gameqa.evaluation.llm_client import OllamaLanguageModel
from gameqa.utils.errors import ErrorKind, GameQAError


def _mock_client(content='{"playability_score": 80}'):
    client = MagicMock()
    client.chat = AsyncMock(return_value={"message": {"role": "assistant", "content": content}})
    return client


class TestOllamaLanguageModel:
    def test_sends_system_and_user_messages(self):
        client = _mock_client()
        with patch("gameqa.evaluation.llm_client.ollama.AsyncClient", return_value=client) as client_cls:
            llm = OllamaLanguageModel(host="http://ollama:11434", model="llama3.2")
            reply = asyncio.run(llm.evaluate("system text", "user text", json_mode=True, temperature=0.3, max_tokens=500))

        assert reply == '{"playability_score": 80}'
        client_cls.assert_called_once_with(host="http://ollama:11434")
        kwargs = client.chat.await_args.kwargs
        assert kwargs["model"] == "llama3.2"
        assert kwargs["messages"] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]
        assert kwargs["format"] == "json"
        assert kwargs["options"] == {"temperature": 0.3, "num_predict": 500}

    def test_plain_text_mode(self):
        client = _mock_client("fine")
        with patch("gameqa.evaluation.llm_client.ollama.AsyncClient", return_value=client):
            asyncio.run(OllamaLanguageModel(model="llama3.2").evaluate("s", "u", json_mode=False))

        assert client.chat.await_args.kwargs["format"] is None

    def test_client_created_once_for_concurrent_calls(self):
        client = _mock_client()
        with patch("gameqa.evaluation.llm_client.ollama.AsyncClient", return_value=client) as client_cls:
            llm = OllamaLanguageModel(model="llama3.2")

            async def scenario():
                return await asyncio.gather(*(llm.evaluate("s", f"u{i}") for i in range(5)))

            replies = asyncio.run(scenario())

        assert len(replies) == 5
        assert client_cls.call_count == 1
        assert client.chat.await_count == 5

    def test_empty_reply_is_llm_failure(self):
        with patch("gameqa.evaluation.llm_client.ollama.AsyncClient", return_value=_mock_client("   ")):
            with pytest.raises(GameQAError) as exc_info:
                asyncio.run(OllamaLanguageModel(model="llama3.2").evaluate("s", "u"))

        assert exc_info.value.kind is ErrorKind.LLM_FAILURE

    def test_request_error_is_llm_failure(self):
        client = MagicMock()
        client.chat = AsyncMock(side_effect=ConnectionError("connection refused"))
        with patch("gameqa.evaluation.llm_client.ollama.AsyncClient", return_value=client):
            with pytest.raises(GameQAError) as exc_info:
                asyncio.run(OllamaLanguageModel(model="llama3.2").evaluate("s", "u"))

        assert exc_info.value.kind is ErrorKind.LLM_FAILURE
        assert "connection refused" in exc_info.value.message
