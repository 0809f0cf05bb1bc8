# chat_triggers/infrastructure/models.py
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from chat_triggers.infrastructure.database import Base


class Document(Base):
    __tablename__ = "documents"

    __table_args__ = (
        Index("ix_documents_collection_doc_id", "collection", "doc_id"),
    )

    # Full slash-separated path, e.g. "chats/c1/messages/m1".
    path: Mapped[str] = mapped_column(String, primary_key=True)
    collection: Mapped[str] = mapped_column(String, index=True)
    doc_id: Mapped[str] = mapped_column(String)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
