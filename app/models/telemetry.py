import math
from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from app.core.errors import InvalidPayload

REQUIRED_EVENT_FIELDS = ("device_id", "temperature", "humidity", "timestamp")


def timestamp_to_ms(value: Any) -> Optional[float]:
    """Normalize a reading timestamp to epoch milliseconds.

    Numbers are taken as epoch milliseconds, numeric strings are parsed as
    numbers and any other string as ISO-8601. Returns None when the value
    cannot be ordered.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            result = float(text)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                return None
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            result = parsed.timestamp() * 1000
    else:
        return None

    return result if math.isfinite(result) else None


class TelemetryReading(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    device_id: str
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    timestamp: Union[int, float, str, None] = None
    owner: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")

    @property
    def timestamp_ms(self) -> Optional[float]:
        return timestamp_to_ms(self.timestamp)


class TelemetryEvent(BaseModel):
    """One inbound device event as delivered by the IoT Core rule.

    Only presence is checked; the numeric fields are forwarded untouched.
    """

    device_id: str
    temperature: Any
    humidity: Any
    timestamp: Any

    @classmethod
    def from_payload(cls, payload: Any) -> "TelemetryEvent":
        if not isinstance(payload, dict):
            raise InvalidPayload()

        for field in REQUIRED_EVENT_FIELDS:
            if payload.get(field) is None:
                raise InvalidPayload(f"Missing telemetry field: {field}")

        device_id = payload["device_id"]
        if not isinstance(device_id, str) or not device_id:
            raise InvalidPayload("device_id must be a non-empty string")

        if payload["timestamp"] == "":
            raise InvalidPayload("timestamp must not be empty")

        return cls(
            device_id=device_id,
            temperature=payload["temperature"],
            humidity=payload["humidity"],
            timestamp=payload["timestamp"],
        )

    @property
    def idempotency_key(self) -> str:
        return f"telemetry:idempotency:{self.device_id}:{self.timestamp}"


class SyntheticTelemetryRequest(BaseModel):
    device_id: Optional[str] = None
