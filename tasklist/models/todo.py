"""
Todo model: a task record owned by exactly one user.

`owner_id` is set from the authenticated identity at creation and never
changes. Every query against this table filters on it.
"""

from sqlalchemy import Column, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import relationship

from tasklist.models.base import Base, TimestampMixin, UUIDMixin

DEFAULT_TODO_STATUS = "pending"


class Todo(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "todos"
    __table_args__ = (
        Index("ix_todos_owner_id", "owner_id"),
        Index("ix_todos_owner_id_status", "owner_id", "status"),
    )

    owner_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning user, fixed at creation",
    )

    text = Column(
        Text,
        nullable=False,
        comment="Free-form task description",
    )

    status = Column(
        String(30),
        nullable=False,
        default=DEFAULT_TODO_STATUS,
        server_default=DEFAULT_TODO_STATUS,
        comment="Open-ended status label, 'pending' by default",
    )

    owner = relationship("User", back_populates="todos")

    def __repr__(self):
        return f"<Todo(id={self.id}, owner_id={self.owner_id}, status='{self.status}')>"
