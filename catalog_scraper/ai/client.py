"""
Content-Understanding Client

Thin wrapper over the OpenAI chat completions API that requests JSON-only
output and always returns a dict. Constructed explicitly by the caller and
injected into whatever needs it; there is no module-level client.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from openai import OpenAI, OpenAIError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"


class ContentUnderstandingClient:
    """
    JSON-mode chat completion client.

    Usage:
        client = ContentUnderstandingClient.from_env()
        data = client.complete_json(prompt, max_tokens=2000)
    """

    def __init__(
        self,
        openai_client: OpenAI,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.1,
    ):
        self.openai_client = openai_client
        self.model = model
        self.temperature = temperature

    @classmethod
    def from_env(cls, api_key: Optional[str] = None, model: Optional[str] = None) -> "ContentUnderstandingClient":
        """Build a client from OPENAI_API_KEY and CATALOG_SCRAPER_AI_MODEL."""
        api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY is not set")
        model = model or os.getenv("CATALOG_SCRAPER_AI_MODEL", DEFAULT_MODEL)
        return cls(OpenAI(api_key=api_key), model=model)

    def complete_json(self, prompt: str, max_tokens: int = 2000) -> Dict[str, Any]:
        """
        Send one prompt and decode the JSON object it returns.

        Returns:
            Decoded object, or an empty dict on API error or malformed output
        """
        try:
            response = self.openai_client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.warning("Content-understanding request failed: %s", e)
            return {}

        try:
            content = response.choices[0].message.content or "{}"
        except (AttributeError, IndexError) as e:
            logger.warning("Unexpected completion shape: %s", e)
            return {}

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning("Model returned invalid JSON: %s", e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Model returned %s instead of an object", type(data).__name__)
            return {}
        return data
