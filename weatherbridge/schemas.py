"""Payload schemas for messages arriving from the device."""
from __future__ import annotations

import json
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

__all__ = ["RefreshPayload", "decode_trigger_payload"]


class RefreshPayload(BaseModel):
    """Body of a refresh request; the device may hand over a provider key."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_key: Optional[str] = Field(default=None, alias="apiKey")

    @field_validator("api_key", mode="before")
    @classmethod
    def _blank_key_is_absent(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None


def decode_trigger_payload(raw: Union[bytes, str, dict, None]) -> RefreshPayload:
    """Validate a raw trigger body; an empty body is an empty payload."""

    if raw is None:
        return RefreshPayload()
    if isinstance(raw, dict):
        data = raw
    else:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        if not raw.strip():
            return RefreshPayload()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError("Invalid JSON trigger payload") from exc
    if not isinstance(data, dict):
        raise ValueError("Trigger payload must be a JSON object")
    try:
        return RefreshPayload.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid trigger payload: {exc}") from exc
