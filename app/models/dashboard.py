from typing import Optional

from pydantic import BaseModel, Field

from app.models.telemetry import TelemetryReading


class CurrentUser(BaseModel):
    user_id: str
    login_id: Optional[str] = None


class DeviceSummary(BaseModel):
    device_id: str
    status: Optional[str] = None
    status_label: str
    connected: bool
    last_seen: str
    last_seen_ms: Optional[float] = None


class ChartSeries(BaseModel):
    title: str
    labels: list[str] = Field(default_factory=list)
    temperature: list[Optional[float]] = Field(default_factory=list)
    humidity: list[Optional[float]] = Field(default_factory=list)


class DashboardView(BaseModel):
    user: CurrentUser
    selected_device: Optional[str] = None
    latest_reading: Optional[TelemetryReading] = None
    devices: list[DeviceSummary]
    chart: ChartSeries
