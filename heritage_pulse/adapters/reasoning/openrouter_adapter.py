"""OpenRouter adapter for itinerary generation and heritage chat.

OpenRouter speaks the OpenAI chat-completions protocol, so the official
``openai`` SDK is pointed at its base URL. Itinerary replies are requested
as JSON objects; when a model rejects structured output the request is
repeated without it and the JSON is recovered from the text instead.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from openai import (
    APIConnectionError,
    BadRequestError,
    InternalServerError,
    OpenAI,
    OpenAIError,
    RateLimitError,
)
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...config import ReasoningConfig, get_config
from ...domain.errors import ConfigurationError, GenerationError
from ...domain.models import (
    ChatMessage,
    ProposedActivity,
    ProposedDay,
    ProposedItinerary,
)
from ..http.retry import RetryPolicy
from .json_extraction import extract_json_object, strip_reasoning

# APITimeoutError subclasses APIConnectionError
_TRANSIENT = (APIConnectionError, RateLimitError, InternalServerError)

GUIDE_PROMPT = """You are Heritage Pulse AI, an expert guide specializing in cultural heritage, historical sites, monuments, and traditions from around the world.

Your role is to:
- Provide accurate, engaging information about heritage sites and cultural traditions
- Share historical context and significance of monuments and landmarks
- Offer travel tips and visiting recommendations
- Explain cultural practices, festivals, and traditions

Be informative, enthusiastic, and respectful of all cultures. When unsure about specific facts, acknowledge limitations rather than inventing information."""

PLANNER_PROMPT = """You are an expert travel planner for Heritage Pulse.
Your task is to generate a detailed, culturally rich itinerary based ONLY on the provided context data.
DO NOT include sites that are not listed in the context's heritage_sites.
Use the exact site name as "location" and the site's "id" as "site_id" for every activity.
Focus on logistics, historical significance, and efficient routing.

Output must be valid JSON matching this structure:
{
  "title": "Itinerary Title",
  "summary": "Brief overview",
  "days": [
    {
      "day": 1,
      "theme": "Theme of the day",
      "activities": [
        {
          "time": "09:00",
          "activity": "Activity description",
          "location": "Location name",
          "site_id": "Site id from the context",
          "notes": "Historical context or tips"
        }
      ]
    }
  ]
}"""


class _ActivityPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    time: str = ""
    activity: str = ""
    location: str = ""
    notes: str = ""
    site_id: Optional[str] = None

    @field_validator("time", "activity", "location", "notes", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("site_id", mode="before")
    @classmethod
    def _as_optional_text(cls, value: Any) -> Optional[str]:
        return None if value in (None, "") else str(value)


class _DayPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    day: int
    theme: str = ""
    activities: List[_ActivityPayload] = Field(default_factory=list)


class _ItineraryPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    summary: str = ""
    days: List[_DayPayload]


def parse_itinerary(data: Mapping[str, Any]) -> ProposedItinerary:
    """Validate a decoded model reply and convert it to domain types.

    Raises:
        ValidationError: If the reply does not have the itinerary shape.
    """
    payload = _ItineraryPayload.model_validate(data)
    return ProposedItinerary(
        title=payload.title,
        summary=payload.summary,
        days=tuple(
            ProposedDay(
                day=day.day,
                theme=day.theme,
                activities=tuple(
                    ProposedActivity(
                        time=a.time,
                        activity=a.activity,
                        location=a.location,
                        notes=a.notes,
                        site_id=a.site_id,
                    )
                    for a in day.activities
                ),
            )
            for day in payload.days
        ),
    )


@dataclass
class OpenRouterReasoningAdapter:
    """Reasoning model client backed by OpenRouter.

    Implements ReasoningModelPort.

    Attributes:
        config: Reasoning model configuration
        client: Pre-built OpenAI client (created lazily when omitted)
        retry: Retry policy for transient API errors
    """

    config: ReasoningConfig = field(default_factory=lambda: get_config().reasoning)
    client: Optional[OpenAI] = None
    retry: Optional[RetryPolicy] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.retry is None:
            self.retry = RetryPolicy.from_settings(self.config)

    def _get_client(self) -> OpenAI:
        if self.client is not None:
            return self.client
        if not self.config.api_key:
            raise GenerationError(
                "Reasoning model API key is not configured",
                cause=ConfigurationError(
                    "Missing OpenRouter API key", setting_name="HP_LLM_API_KEY"
                ),
            )

        self.client = OpenAI(
            base_url=self.config.base_url,
            api_key=self.config.api_key,
            timeout=self.config.timeout_seconds,
            max_retries=0,
            default_headers={
                "HTTP-Referer": self.config.site_url,
                "X-Title": self.config.app_title,
            },
        )
        return self.client

    def generate_itinerary(self, context: Mapping[str, Any]) -> ProposedItinerary:
        messages = [
            {"role": "system", "content": PLANNER_PROMPT},
            {
                "role": "user",
                "content": "Create an itinerary based on the following data: "
                + json.dumps(context, ensure_ascii=False, default=str),
            },
        ]
        text = self._complete(
            model=self.config.reasoning_model,
            messages=messages,
            temperature=self.config.temperature,
            json_mode=self.config.structured_output,
        )

        try:
            itinerary = parse_itinerary(extract_json_object(text))
        except (ValueError, ValidationError) as e:
            self._logger.warning(
                "Unusable itinerary reply",
                extra={"model": self.config.reasoning_model, "error": str(e)},
            )
            raise GenerationError("Failed to parse AI response into an itinerary", cause=e)

        self._logger.info(
            "Itinerary generated",
            extra={"model": self.config.reasoning_model, "days": len(itinerary.days)},
        )
        return itinerary

    def chat(
        self,
        messages: Sequence[ChatMessage],
        context: Optional[Mapping[str, Any]] = None,
    ) -> str:
        system = GUIDE_PROMPT
        if context:
            system += "\n\nContext: " + json.dumps(context, ensure_ascii=False, default=str)

        payload: List[Dict[str, str]] = [{"role": "system", "content": system}]
        payload.extend({"role": m.role, "content": m.content} for m in messages)
        text = self._complete(
            model=self.config.chat_model,
            messages=payload,
            temperature=self.config.chat_temperature,
            json_mode=False,
        )
        return strip_reasoning(text)

    def _complete(
        self,
        model: str,
        messages: List[Dict[str, str]],
        temperature: float,
        json_mode: bool,
    ) -> str:
        client = self._get_client()
        request: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": self.config.max_tokens,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        assert self.retry is not None
        try:
            response = self.retry.call(
                lambda: client.chat.completions.create(**request),
                retry_on=_TRANSIENT,
                operation=f"openrouter.{model}",
            )
        except BadRequestError as e:
            if json_mode:
                self._logger.info(
                    "Structured output rejected, retrying as plain text",
                    extra={"model": model, "error": str(e)},
                )
                return self._complete(model, messages, temperature, json_mode=False)
            raise GenerationError("Reasoning model rejected the request", cause=e)
        except OpenAIError as e:
            self._logger.warning(
                "Reasoning model unavailable",
                extra={"model": model, "error": str(e)},
            )
            raise GenerationError("AI service temporarily unavailable", cause=e)

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise GenerationError("No content received from AI")
        return content
