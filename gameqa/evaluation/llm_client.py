"""
Language model client - Ollama adapter behind a narrow protocol
"""
import asyncio
import logging
from typing import Optional, Protocol

import ollama

from ..config import settings
from ..utils.errors import ErrorKind, GameQAError, describe_error

logger = logging.getLogger(__name__)


class LanguageModel(Protocol):
    """What the evaluator needs from a language model."""

    async def evaluate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        json_mode: bool = True,
        temperature: float = 0.3,
        max_tokens: int = 1000
    ) -> str: ...


class OllamaLanguageModel:
    """
    Language model backed by a local Ollama server.

    Construct one per process and pass it to every orchestrator. The
    underlying client is created on first use; concurrent sessions share it.
    """

    def __init__(self, host: Optional[str] = None, model: Optional[str] = None):
        """
        Args:
            host: Ollama server URL. Defaults to settings.OLLAMA_HOST
            model: Model name. Defaults to settings.OLLAMA_MODEL
        """
        self.host = host or settings.OLLAMA_HOST
        self.model = model or settings.OLLAMA_MODEL
        self._client: Optional[ollama.AsyncClient] = None
        self._lock = asyncio.Lock()

    async def _get_client(self) -> ollama.AsyncClient:
        if self._client is not None:
            return self._client
        async with self._lock:
            if self._client is None:
                logger.info(f"Creating Ollama client for {self.host} (model {self.model})")
                self._client = ollama.AsyncClient(host=self.host)
        return self._client

    async def evaluate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        json_mode: bool = True,
        temperature: float = 0.3,
        max_tokens: int = 1000
    ) -> str:
        """
        Send one chat request and return the reply text.

        Raises:
            GameQAError: LLM_FAILURE when the call fails or the reply is empty
        """
        client = await self._get_client()

        try:
            response = await client.chat(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                format="json" if json_mode else None,
                options={"temperature": temperature, "num_predict": max_tokens}
            )
        except Exception as e:
            raise GameQAError(
                ErrorKind.LLM_FAILURE,
                f"Language model request failed: {describe_error(e)}",
                {"model": self.model}
            ) from e

        content = response["message"]["content"]
        if not content or not content.strip():
            raise GameQAError(ErrorKind.LLM_FAILURE, "Empty response from language model", {"model": self.model})
        return content
