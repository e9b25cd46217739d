"""OpenAI client provider."""

from __future__ import annotations

import logging
from typing import Optional

from openai import OpenAI

logger = logging.getLogger(__name__)


class OpenAIProvider:
    """Hand out OpenAI client instances for a configured API key."""

    def __init__(self, api_key: Optional[str] = None, timeout: float = 20.0) -> None:
        self._api_key = api_key
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def get_client(self) -> OpenAI:
        """Return an authenticated OpenAI client."""

        if not self._api_key:
            raise RuntimeError("OPENAI_API_KEY is not configured")
        logger.debug("using_openai_api_key_from_config")
        return OpenAI(api_key=self._api_key, timeout=self._timeout, max_retries=0)
