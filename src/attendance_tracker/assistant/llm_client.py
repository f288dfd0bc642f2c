from __future__ import annotations

import logging
from typing import Optional, Protocol

from openai import OpenAI, OpenAIError

from ..core.constants import DEFAULT_LLM_BASE_URL, DEFAULT_LLM_MODEL
from ..core.exceptions import AssistantError

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    def complete(self, prompt: str) -> Optional[str]:
        """Send one user message and return the reply text, if any."""

        raise NotImplementedError


class OpenAICompletionClient(CompletionClient):
    """Chat completions over the OpenAI SDK; the base URL may point at any compatible API."""

    def __init__(
        self,
        *,
        api_key: Optional[str],
        base_url: str = DEFAULT_LLM_BASE_URL,
        model: str = DEFAULT_LLM_MODEL,
    ):
        self._api_key = api_key
        self._base_url = base_url
        self._model = model
        self._client: Optional[OpenAI] = None

    def _get_client(self) -> OpenAI:
        if self._client is None:
            if not self._api_key:
                raise AssistantError("The assistant is not configured (missing API key)")
            self._client = OpenAI(api_key=self._api_key, base_url=self._base_url)
        return self._client

    def complete(self, prompt: str) -> Optional[str]:
        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
            )
        except OpenAIError as e:
            logger.warning("completion request failed: %s", e)
            raise AssistantError(str(e)) from e

        if not response.choices:
            return None
        return response.choices[0].message.content
