from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from paster.domain.durations import DEFAULT_AUTHOR, DEFAULT_TITLE, parse_duration, ttl
from paster.domain.languages import DEFAULT_LANGUAGE, is_known_language
from paster.domain.models import NewPaste, PasteRecord


_LABEL_DEFAULTS = {
    "title": DEFAULT_TITLE,
    "author": DEFAULT_AUTHOR,
    "language": DEFAULT_LANGUAGE,
}


class PasteCreateRequest(BaseModel):
    code: str = Field(..., description="Paste content")
    title: str = Field(default=DEFAULT_TITLE, description="Paste title")
    author: str = Field(default=DEFAULT_AUTHOR, description="Author name")
    language: str = Field(
        default=DEFAULT_LANGUAGE,
        description="Highlighting language, one of the known languages",
    )
    duration: Optional[str] = Field(
        default=None,
        description="Lifetime label: hour, day, week or month",
    )
    private: bool = Field(
        default=False,
        description="Hide the paste from recent listings and search",
    )

    @field_validator("title", "author", "language", mode="before")
    @classmethod
    def _blank_to_default(cls, value: object, info: ValidationInfo) -> object:
        # Leading whitespace is dropped; a blank label keeps the default.
        if value is None:
            return _LABEL_DEFAULTS[info.field_name]
        if isinstance(value, str):
            stripped = value.lstrip()
            return stripped or _LABEL_DEFAULTS[info.field_name]
        return value

    @field_validator("language")
    @classmethod
    def _known_language(cls, value: str) -> str:
        if not is_known_language(value):
            raise ValueError(f"unknown language {value!r}")
        return value

    def to_new_paste(self) -> NewPaste:
        return NewPaste(
            code=self.code,
            title=self.title,
            author=self.author,
            language=self.language,
            duration=parse_duration(self.duration),
            visible=not self.private,
        )


class ListQuery(BaseModel):
    limit: Optional[int] = Field(default=None, ge=1, description="Maximum pastes returned")


class SearchQuery(ListQuery):
    title: Optional[str] = None
    author: Optional[str] = None
    language: Optional[str] = None


class PasteResponse(BaseModel):
    id: str
    title: str
    author: str
    language: str
    code: str
    created_at: datetime
    expires_at: datetime
    duration: int
    visible: bool
    ttl: str

    @classmethod
    def from_record(cls, record: PasteRecord) -> PasteResponse:
        return cls(
            id=record.id,
            title=record.title,
            author=record.author,
            language=record.language,
            code=record.code,
            created_at=record.created_at,
            expires_at=record.expires_at,
            duration=record.duration,
            visible=record.visible,
            ttl=ttl(record.created_at, record.duration),
        )


class HealthResponse(BaseModel):
    status: str = "ok"
