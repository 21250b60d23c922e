import uuid
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.models.orm.base import Base


class PasswordHistory(Base):
    """A previously used password hash. Rows are append-only."""

    __tablename__ = "password_history"
    __table_args__ = (
        Index("idx_password_history_user_id", "user_id"),
        Index("idx_password_history_changed_at", "changed_at"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    def __repr__(self) -> str:
        # Never render the hash
        return (
            f"PasswordHistory(id={self.id}, user_id={self.user_id!s}, "
            f"password_hash='***', changed_at={self.changed_at})"
        )
