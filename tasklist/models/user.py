"""
User model for authentication and todo ownership.

Architecture:
    User → Todo

Email is the login key and carries a unique index; the index, not an
application-level lookup, is what guarantees one account per address.
"""

from sqlalchemy import Column, Index, String
from sqlalchemy.orm import relationship

from tasklist.models.base import Base, TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin):
    """
    Registered account that owns todos.
    """

    __tablename__ = "users"
    __table_args__ = (Index("ix_users_email", "email", unique=True),)
    __private_columns__ = ("password_hash",)

    username = Column(
        String(50),
        nullable=False,
        comment="Display name, not unique",
    )

    email = Column(
        String(255),
        nullable=False,
        comment="Unique login identifier",
    )

    password_hash = Column(
        String(255),
        nullable=False,
        comment="bcrypt hash embedding its own salt and cost",
    )

    todos = relationship(
        "Todo",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
        doc="Todos owned by this user",
    )

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"
