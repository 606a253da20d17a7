import math
from datetime import datetime, timezone
from typing import Optional

from app.models.dashboard import ChartSeries, CurrentUser, DashboardView, DeviceSummary
from app.models.device import Device
from app.models.telemetry import TelemetryReading

NOT_SEEN = "N/A"

# Thresholds follow the usual "time ago" rounding:
# 45s, 45min, 22h, 26d, 11 months.
_SECONDS_PER = {
    "minute": 60,
    "hour": 3600,
    "day": 86400,
    "month": 86400 * 30.4375,
    "year": 86400 * 365.25,
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _describe(seconds: float) -> str:
    if _round_half_up(seconds) < 45:
        return "a few seconds"

    minutes = _round_half_up(seconds / _SECONDS_PER["minute"])
    if minutes <= 1:
        return "a minute"
    if minutes < 45:
        return f"{minutes} minutes"

    hours = _round_half_up(seconds / _SECONDS_PER["hour"])
    if hours <= 1:
        return "an hour"
    if hours < 22:
        return f"{hours} hours"

    days = _round_half_up(seconds / _SECONDS_PER["day"])
    if days <= 1:
        return "a day"
    if days < 26:
        return f"{days} days"

    months = _round_half_up(seconds / _SECONDS_PER["month"])
    if months <= 1:
        return "a month"
    if months < 11:
        return f"{months} months"

    years = _round_half_up(seconds / _SECONDS_PER["year"])
    if years <= 1:
        return "a year"
    return f"{years} years"


def relative_time(timestamp_ms: Optional[float], now_ms: float) -> str:
    if timestamp_ms is None:
        return NOT_SEEN

    delta_seconds = (now_ms - timestamp_ms) / 1000
    phrase = _describe(abs(delta_seconds))
    if delta_seconds < 0:
        return f"in {phrase}"
    return f"{phrase} ago"


def _sort_key(reading: TelemetryReading) -> float:
    ts = reading.timestamp_ms
    return ts if ts is not None else float("-inf")


def latest_reading(readings: list[TelemetryReading]) -> Optional[TelemetryReading]:
    timed = [r for r in readings if r.timestamp_ms is not None]
    if not timed:
        return None
    return max(timed, key=_sort_key)


def last_seen_ms(readings: list[TelemetryReading], device_id: str) -> Optional[float]:
    stamps = [
        r.timestamp_ms
        for r in readings
        if r.device_id == device_id and r.timestamp_ms is not None
    ]
    return max(stamps) if stamps else None


def resolve_selection(devices: list[Device], selected: Optional[str]) -> Optional[str]:
    if selected:
        return selected
    return devices[0].device_id if devices else None


def fallback_selection(
    devices: list[Device], deleted_id: str, selected: Optional[str]
) -> Optional[str]:
    """Selection after ``deleted_id`` is removed from ``devices``."""
    if selected != deleted_id:
        return selected
    for device in devices:
        if device.device_id != deleted_id:
            return device.device_id
    return None


def _clock_label(timestamp_ms: Optional[float]) -> str:
    if timestamp_ms is None:
        return ""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.strftime("%H:%M:%S")


def chart_series(
    readings: list[TelemetryReading], selected: Optional[str], max_points: int
) -> ChartSeries:
    title = f"Device: {selected}" if selected else "No device selected"
    if not selected:
        return ChartSeries(title=title)

    series = sorted((r for r in readings if r.device_id == selected), key=_sort_key)
    if max_points > 0:
        series = series[-max_points:]

    return ChartSeries(
        title=title,
        labels=[_clock_label(r.timestamp_ms) for r in series],
        temperature=[r.temperature for r in series],
        humidity=[r.humidity for r in series],
    )


def summarize_device(
    device: Device, readings: list[TelemetryReading], now_ms: float
) -> DeviceSummary:
    seen = last_seen_ms(readings, device.device_id)
    return DeviceSummary(
        device_id=device.device_id,
        status=device.status,
        status_label=device.status_label,
        connected=device.connected,
        last_seen=relative_time(seen, now_ms),
        last_seen_ms=seen,
    )


def build_dashboard(
    user: CurrentUser,
    devices: list[Device],
    readings: list[TelemetryReading],
    selected: Optional[str],
    now_ms: float,
    max_points: int = 20,
) -> DashboardView:
    selected = resolve_selection(devices, selected)
    return DashboardView(
        user=user,
        selected_device=selected,
        latest_reading=latest_reading(readings),
        devices=[summarize_device(d, readings, now_ms) for d in devices],
        chart=chart_series(readings, selected, max_points),
    )
