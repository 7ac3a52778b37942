"""Comment model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from ludicboard.database import Base


class Comment(Base):
    """Comment left by a user on a task. Authorship never changes."""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    text = Column(Text, nullable=False)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    task = relationship("Task", back_populates="comments")
    user = relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, task_id={self.task_id}, user_id={self.user_id})>"


__all__ = ["Comment"]
