"""LLM clients that turn a free-text query into a SearchIntent and suggestions."""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional

from .config import LLMConfig
from .contracts.intent import SearchIntent
from .errors import ExternalServiceError
from .prompts import (
    INTENT_SYSTEM_PROMPT,
    SUGGESTIONS_SYSTEM_PROMPT,
    build_intent_prompt,
    build_suggestions_prompt,
)

logger = logging.getLogger(__name__)


def fallback_intent(query: str) -> SearchIntent:
    """Intent used when no language model is available or it failed."""

    return SearchIntent.fallback(query)


def parse_json_response(text: str) -> Any:
    """Decode a model response, tolerating a surrounding markdown code fence."""

    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else ""
        if cleaned.rstrip().endswith("```"):
            cleaned = cleaned.rstrip()[:-3]
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ExternalServiceError(f"LLM returned invalid JSON: {exc}") from exc


class IntentClient(ABC):
    """Base class for provider specific intent clients."""

    def __init__(self, config: LLMConfig) -> None:
        self.config = config

    async def parse_intent(self, query: str) -> SearchIntent:
        payload = await self._complete_json(
            build_intent_prompt(query),
            system=INTENT_SYSTEM_PROMPT,
            temperature=self.config.intent_temperature,
        )
        if not isinstance(payload, dict):
            raise ExternalServiceError("intent response was not a JSON object")
        intent = SearchIntent.from_payload(payload, query=query)
        logger.debug("Parsed intent for '%s': %s", query, intent.to_dict())
        return intent

    async def generate_suggestions(self, query: str, mood: Optional[Iterable[str]] = None) -> List[str]:
        payload = await self._complete_json(
            build_suggestions_prompt(query, mood, count=self.config.max_suggestions),
            system=SUGGESTIONS_SYSTEM_PROMPT,
            temperature=self.config.suggestion_temperature,
        )
        suggestions = payload.get("suggestions") if isinstance(payload, dict) else payload
        if not isinstance(suggestions, list):
            raise ExternalServiceError("suggestions response had no 'suggestions' list")

        seen = {query.strip().lower()}
        cleaned: List[str] = []
        for item in suggestions:
            if not isinstance(item, str):
                continue
            text = " ".join(item.split())
            if text and text.lower() not in seen:
                seen.add(text.lower())
                cleaned.append(text)
        return cleaned[: self.config.max_suggestions]

    async def _complete_json(self, prompt: str, *, system: str, temperature: float) -> Any:
        try:
            text = await asyncio.to_thread(self._generate, prompt, system, temperature)
        except ExternalServiceError:
            raise
        except Exception as exc:
            raise ExternalServiceError(f"{self.config.provider} request failed: {exc}") from exc
        if not text or not text.strip():
            raise ExternalServiceError("LLM returned empty response")
        return parse_json_response(text)

    @abstractmethod
    def _generate(self, prompt: str, system: str, temperature: float) -> str:
        """Blocking provider call returning the raw response text."""


class GeminiIntentClient(IntentClient):
    """Gemini implementation using JSON response mode."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        import google.generativeai as genai

        genai.configure(api_key=config.api_key)
        self._genai = genai

    def _generate(self, prompt: str, system: str, temperature: float) -> str:
        # system instructions are bound to the model object in this SDK
        model = self._genai.GenerativeModel(self.config.model, system_instruction=system)
        response = model.generate_content(
            prompt,
            generation_config={
                "response_mime_type": "application/json",
                "temperature": temperature,
            },
        )
        result_text = getattr(response, "text", None)
        if not result_text and getattr(response, "candidates", None):
            parts = [
                part.text
                for candidate in response.candidates
                for part in getattr(candidate, "content", {}).parts
                if hasattr(part, "text")
            ]
            result_text = "".join(parts)
        return result_text or ""


class OpenAIIntentClient(IntentClient):
    """OpenAI implementation using the JSON object response format."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        from openai import OpenAI

        self._client = OpenAI(api_key=config.api_key)

    def _generate(self, prompt: str, system: str, temperature: float) -> str:
        params = {}
        # GPT-5 style models do not expose temperature
        if not self.config.model.lower().startswith("gpt-5"):
            params["temperature"] = temperature
        response = self._client.chat.completions.create(
            model=self.config.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            **params,
        )
        choice = response.choices[0]
        return choice.message.content if choice.message else ""


def create_intent_client(config: Optional[LLMConfig]) -> Optional[IntentClient]:
    """Factory for provider specific intent clients; None when no LLM is configured."""

    if config is None:
        return None
    provider = config.provider.lower()
    if provider in {"gemini", "google"}:
        return GeminiIntentClient(config)
    if provider in {"openai", "gpt"}:
        return OpenAIIntentClient(config)

    raise ValueError(f"Unsupported LLM provider: {config.provider}")
