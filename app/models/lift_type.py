"""LiftType model - shared catalog used to tag exercises and group progression."""

from __future__ import annotations

import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class LiftType(Base):
    """Named lift (e.g. Bench Press). Global, not user-scoped."""

    __tablename__ = "lift_types"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    exercises: Mapped[list["Exercise"]] = relationship("Exercise", back_populates="lift_type")
