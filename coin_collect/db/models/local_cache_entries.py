from __future__ import annotations

from datetime import datetime

from sqlalchemy import CHAR, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from coin_collect.db.models.base import Base


class LocalCacheEntry(Base):
    __tablename__ = "local_cache_entries"

    key: Mapped[str] = mapped_column(String(96), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    signature: Mapped[str] = mapped_column(CHAR(64), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
