from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

CONNECTED = "connected"


class Device(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    device_id: str
    owner: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")

    @property
    def connected(self) -> bool:
        return self.status == CONNECTED

    @property
    def status_label(self) -> str:
        if not self.status:
            return "Unknown"
        return self.status[0].upper() + self.status[1:]


class DeviceCreate(BaseModel):
    device_id: str


class DeviceDeleted(BaseModel):
    device_id: str
    accepted: bool
    selected: Optional[str] = None
