import secrets
from sqlalchemy import Column, String, DateTime
from tvboard.db import Base, utcnow


def new_layout_id() -> str:
    # 20 URL-safe characters, same collision budget as a nanoid.
    return secrets.token_urlsafe(15)


class Layout(Base):
    __tablename__ = "layout"
    id = Column(String(32), primary_key=True, default=new_layout_id)
    name = Column(String, nullable=False)
    tv1_url = Column(String, nullable=True)
    tv2_url = Column(String, nullable=True)
    tv3_url = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
