"""
LLM API Client

The provider speaks the OpenAI chat-completions API, so we use the openai
library and point it at the configured base URL.

The LLM is used for: resume feedback, company requirement generation,
career-plan generation, interview-review extraction and the chat assistant.
Its structured output is stored; PostgreSQL stays the source of truth.
"""
import json
import logging
from typing import Dict, List, Optional, Tuple

from openai import OpenAI

from studentpath.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


class LLMClient:
    """
    Thin wrapper over the chat-completions endpoint.
    """

    def __init__(self):
        self.client = OpenAI(
            api_key=settings.openai_api_key or "missing-key",
            base_url=settings.openai_base_url
        )
        self.model = settings.llm_model

    def _call_api(
        self,
        system_prompt: str,
        user_content: str,
        max_tokens: int = 1000,
        temperature: float = 0.1,
        json_mode: bool = False,
    ) -> str:
        """
        Internal method to call the completion API.
        Returns raw text response ("" when the model returns no content).
        """
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content}
            ],
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs
        )
        return response.choices[0].message.content or ""

    def chat(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int = 1500,
        temperature: float = 0.7,
    ) -> Tuple[str, int]:
        """Multi-turn completion. Returns (content, total_tokens)."""
        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        content = response.choices[0].message.content or ""
        tokens = response.usage.total_tokens if response.usage else 0
        return content, tokens

    def _extract_json(self, text: str) -> dict:
        """
        Extract JSON from API response.
        Handles cases where model wraps JSON in markdown code blocks.
        """
        text = text.strip()
        if text.startswith("```json"):
            text = text[7:]
        if text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]

        return json.loads(text.strip())

    def complete_json(
        self,
        system_prompt: str,
        user_content: str,
        max_tokens: int = 1000,
        temperature: float = 0.1,
        json_mode: bool = False,
    ) -> dict:
        response = self._call_api(system_prompt, user_content, max_tokens, temperature, json_mode)
        if not response:
            raise ValueError("Empty response from LLM")
        return self._extract_json(response)

    def test_connection(self) -> bool:
        """Test if the LLM API is reachable"""
        try:
            response = self._call_api(
                "You are a test assistant.",
                "Reply with exactly: OK",
                max_tokens=10
            )
            return "OK" in response.upper()
        except Exception as e:
            logger.error(f"LLM connection failed: {e}")
            return False


# Singleton instance
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create LLM client (singleton pattern)"""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client
