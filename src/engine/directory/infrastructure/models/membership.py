"""SQLAlchemy ORM model for the user_groups association table.

Foreign Key Constraints:
- user_id references users.id with CASCADE delete
- group_id references groups.id with CASCADE delete
"""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base


class UserGroupModel(Base):
    """ORM model for one (user, group) membership record."""

    __tablename__ = "user_groups"

    user_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    group_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("groups.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserGroupModel(user_id={self.user_id}, group_id={self.group_id})>"
