"""Pydantic schemas for the send form and quota endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mailgate.services.event_log import QuotaSnapshot


class SendEmailRequest(BaseModel):
    """Fields submitted by the dashboard send form."""

    to: str = Field(..., description="Primary recipient address(es), comma-separated.")
    cc: str | None = Field(default=None, description="Optional CC address(es), comma-separated.")
    subject: str = Field(..., description="Message subject line.")
    body: str = Field(default="", description="HTML message body.")

    @field_validator("to", "subject")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        return value.strip()

    @field_validator("cc")
    @classmethod
    def _blank_cc_is_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()


class EmailQuotaResponse(BaseModel):
    """Current state of the rolling send window."""

    model_config = ConfigDict(populate_by_name=True)

    count: int = Field(..., description="Emails sent in the last 24 hours.")
    limit: int = Field(..., description="Maximum emails per 24 hours.")
    remaining: int = Field(..., description="Emails still allowed in the window.")
    reset_in_ms: int = Field(
        ...,
        alias="resetInMs",
        description="Milliseconds until capacity frees up; 0 while under the limit.",
    )
    reset_in_human: str = Field(
        ...,
        alias="resetInHuman",
        description="Reset time as whole hours and minutes, e.g. '3h 15m'.",
    )

    @classmethod
    def from_snapshot(cls, snapshot: QuotaSnapshot) -> "EmailQuotaResponse":
        return cls(
            count=snapshot.count,
            limit=snapshot.limit,
            remaining=snapshot.remaining,
            reset_in_ms=snapshot.reset_in_ms,
            reset_in_human=str(snapshot.reset_in),
        )
