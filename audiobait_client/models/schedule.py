"""
Pydantic models for the audio lure schedule and the API response envelopes
that carry it.
"""

from typing import Any

from pydantic import BaseModel, Field, model_validator


class WireModel(BaseModel):
    """Base for server payloads. A JSON null decodes to the field default."""

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class Combo(WireModel):
    """
    One playback recipe: a time-of-day window plus parallel sequences of
    waits, sound file identifiers and volumes. Items at the same index
    describe the same event; the sequences are not checked for equal length.
    """

    from_: str = Field("", alias="from")
    until: str = ""
    waits: list[int] = Field(default_factory=list)
    sounds: list[str] = Field(default_factory=list)
    volumes: list[int] = Field(default_factory=list)

    class Config:
        """Pydantic model configuration."""

        populate_by_name = True


class Schedule(WireModel):
    """The audio lure schedule for a device."""

    combos: list[Combo] = Field(default_factory=list)
    all_sounds: list[int] = Field(default_factory=list, alias="allSounds")
    play_nights: int = Field(0, alias="playNights")
    description: str = ""

    class Config:
        """Pydantic model configuration."""

        populate_by_name = True

    @property
    def all_sound_file_ids(self) -> list[int]:
        """Every file ID referenced by the schedule, as supplied by the server."""
        return self.all_sounds


class ScheduleResponse(WireModel):
    schedule: Schedule = Field(default_factory=Schedule)


class FileTokenResponse(WireModel):
    jwt: str


class TokenResponse(WireModel):
    """Body returned by the device authentication endpoint."""

    success: bool = False
    messages: list[str] = Field(default_factory=list)
    token: str = ""

    def message(self) -> str:
        """Returns the first server message, or 'unknown' if there is none."""
        if self.messages:
            return self.messages[0]
        return "unknown"
