"""Tag model."""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, new_id

NAME_MAX_LENGTH = 100
HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class Tag(Base, TimestampMixin):
    """Named, colored label; name is unique per user."""

    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("user_id", "name", name="tags_user_id_name_key"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    color: Mapped[str | None] = mapped_column(String(7), nullable=True)  # #RRGGBB

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="tags")

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"
