from datetime import datetime
from pydantic import BaseModel


class ScreenOut(BaseModel):
    id: str
    position: int
    image_url: str | None = None
    updated_at: datetime
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ScreenOrderIn(BaseModel):
    id: str
    position: int


class ScreenImageIn(BaseModel):
    # Required, null clears the image.
    image_url: str | None


class ShowNumbersIn(BaseModel):
    show: bool


class ShowNumbersOut(BaseModel):
    show_tv_numbers: bool


class TriggerReloadIn(BaseModel):
    trigger: bool


class TriggerReloadOut(BaseModel):
    trigger_reload: bool
