"""Request models for the HTTP API.

These only check the shape of a request; the services re-check the
values they depend on, so they stay safe to call without the API.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from ..domain.models import ItineraryPreferences, SiteCategory, parse_clock
from ..services.chat import MAX_MESSAGE_CHARS
from ..services.planner import MAX_DAYS


class _Request(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class DiscoverRequest(_Request):
    location: str = Field(..., min_length=2, max_length=200)
    radius_km: float = Field(
        10, ge=1, le=100, validation_alias=AliasChoices("radius_km", "radius")
    )
    categories: List[SiteCategory] = Field(default_factory=list)


class PreferencesModel(_Request):
    categories: List[SiteCategory] = Field(default_factory=list)
    pace: Literal["relaxed", "moderate", "packed"] = "moderate"
    # Omitted times fall back to the planner's configured day window
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _valid_clock(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            parse_clock(value)
        return value

    @model_validator(mode="after")
    def _start_before_end(self) -> PreferencesModel:
        if self.start_time and self.end_time:
            if parse_clock(self.start_time) >= parse_clock(self.end_time):
                raise ValueError("start_time must be before end_time")
        return self

    def to_domain(self, day_start: str, day_end: str) -> ItineraryPreferences:
        return ItineraryPreferences(
            categories=tuple(self.categories),
            pace=self.pace,
            start_time=self.start_time or day_start,
            end_time=self.end_time or day_end,
        )


class ItineraryRequest(_Request):
    location: str = Field(..., min_length=2, max_length=200)
    days: int = Field(..., ge=1, le=MAX_DAYS)
    radius_km: float = Field(
        50, ge=5, le=100, validation_alias=AliasChoices("radius_km", "radius")
    )
    preferences: PreferencesModel = Field(default_factory=PreferencesModel)
    mode: Literal["ai", "optimize"] = "ai"


class ChatRequest(_Request):
    message: str = Field(..., min_length=1, max_length=MAX_MESSAGE_CHARS)
    conversation_id: Optional[str] = Field(default=None, max_length=100)
