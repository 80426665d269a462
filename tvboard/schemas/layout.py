from datetime import datetime
from pydantic import BaseModel


class LayoutIn(BaseModel):
    name: str
    tv1_url: str | None = None
    tv2_url: str | None = None
    tv3_url: str | None = None


class LayoutRenameIn(BaseModel):
    name: str


class LayoutOut(BaseModel):
    id: str
    name: str
    tv1_url: str | None = None
    tv2_url: str | None = None
    tv3_url: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
