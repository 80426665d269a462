from datetime import datetime
from pydantic import BaseModel


class ImageOut(BaseModel):
    name: str
    size: int
    last_modified: datetime
    url: str

    class Config:
        from_attributes = True


class ImageUploadIn(BaseModel):
    filename: str
    data: str  # base64, optionally with a data URL prefix
    mime_type: str


class ImageUploadOut(ImageOut):
    original_name: str


class ImagePageOut(BaseModel):
    images: list[ImageOut]
    total: int
    page: int
    limit: int
    total_pages: int
