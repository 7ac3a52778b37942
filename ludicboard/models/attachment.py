"""Attachment model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from ludicboard.database import Base


class Attachment(Base):
    """File reference attached to a task."""

    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, index=True)
    file_url = Column(String(1000), nullable=False)
    file_name = Column(String(255), nullable=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    uploaded_by_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    task = relationship("Task", back_populates="attachments")

    def __repr__(self) -> str:
        return f"<Attachment(id={self.id}, task_id={self.task_id}, file_name='{self.file_name}')>"


__all__ = ["Attachment"]
