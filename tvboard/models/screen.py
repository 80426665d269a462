from sqlalchemy import Column, Integer, String, DateTime
from tvboard.db import Base, utcnow


class Screen(Base):
    __tablename__ = "screen"
    id = Column(String(8), primary_key=True)
    position = Column(Integer, nullable=False)
    image_url = Column(String, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    created_at = Column(DateTime, default=utcnow)
