"""Input data models: emotion records as supplied by a record source.

Records are validated with Pydantic at the loader boundary and are frozen
afterwards.  A record that fails validation is dropped with a warning;
it never aborts a whole batch.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from moodscope.utils.timestamps import parse_timestamp

logger = logging.getLogger(__name__)


class RecordParseError(ValueError):
    """A single raw record could not be turned into an ``EmotionRecord``."""


class EmotionCause(BaseModel):
    """A free-text reason given for a detected emotion."""

    model_config = ConfigDict(frozen=True)

    cause: str = ""
    description: str | None = None


class EmotionDetection(BaseModel):
    """One emotion detected in a conversation.

    ``intensity`` is stored as supplied: sources mix a 0–100 scale with a
    0–1 scale; the analysis normalises it.  ``localized`` carries the
    source's own display label (``emotion_cn``), used for emotions the catalog
    does not know.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    emotion: str
    intensity: float = 0.0
    causes: tuple[EmotionCause, ...] = ()
    localized: str | None = Field(
        default=None, validation_alias=AliasChoices("localized", "emotion_cn")
    )

    @field_validator("emotion")
    @classmethod
    def _emotion_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("emotion label is empty")
        return value

    @field_validator("intensity", mode="before")
    @classmethod
    def _intensity_is_number(cls, value: Any) -> Any:
        if value is None:
            return 0.0
        if isinstance(value, bool):
            raise ValueError("intensity must be a number, not a boolean")
        return value

    @field_validator("intensity")
    @classmethod
    def _intensity_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("intensity must be finite")
        return value

    @field_validator("causes", mode="before")
    @classmethod
    def _causes_default(cls, value: Any) -> Any:
        return () if value is None else value

    def cause_labels(self) -> list[str]:
        """Non-blank cause texts, in order, stripped."""
        return [c.cause.strip() for c in self.causes if c.cause and c.cause.strip()]


class EmotionRecord(BaseModel):
    """One analysed conversation: when it happened, a summary, and its emotions."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: datetime
    summary: str | None = None
    thread_id: str | None = None
    detected_emotions: tuple[EmotionDetection, ...] = Field(
        default=(),
        validation_alias=AliasChoices("detected_emotions", "detectedEmotions", "emotions"),
    )

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: Any) -> datetime:
        if isinstance(value, datetime):
            return value if value.tzinfo else parse_timestamp(value.isoformat())
        if isinstance(value, str):
            return parse_timestamp(value)
        raise ValueError(f"unsupported timestamp type {type(value).__name__}")

    @field_validator("detected_emotions", mode="before")
    @classmethod
    def _emotions_default(cls, value: Any) -> Any:
        return () if value is None else value


def parse_record(raw: Mapping[str, Any]) -> EmotionRecord:
    """Validate one raw record.

    A missing ``timestamp`` falls back to the storage ``key`` field, which
    embeds the conversation time.
    """
    if not isinstance(raw, Mapping):
        raise RecordParseError(f"record must be an object, got {type(raw).__name__}")
    data = dict(raw)
    if not data.get("timestamp") and data.get("key"):
        data["timestamp"] = data["key"]
    try:
        return EmotionRecord.model_validate(data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}"
            for err in exc.errors()
        )
        raise RecordParseError(problems) from exc


def parse_records(raw_records: Iterable[Any]) -> list[EmotionRecord]:
    """Validate a batch, dropping (and logging) each malformed record."""
    records: list[EmotionRecord] = []
    skipped = 0
    for index, raw in enumerate(raw_records):
        if isinstance(raw, EmotionRecord):
            records.append(raw)
            continue
        try:
            records.append(parse_record(raw))
        except RecordParseError as exc:
            skipped += 1
            logger.warning("Skipping record %d: %s", index, exc)
    if skipped:
        logger.info("Parsed %d records, skipped %d malformed", len(records), skipped)
    return records
