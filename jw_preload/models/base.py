"""Base model with common fields."""

import time

from sqlalchemy import BigInteger
from sqlalchemy.orm import Mapped, mapped_column

from jw_preload.core.database import Base


def unix_now() -> int:
    """Current time as whole unix seconds."""
    return int(time.time())


class CreatedMixin:
    """Mixin for a unix ``created`` timestamp."""

    created: Mapped[int] = mapped_column(
        BigInteger,
        default=unix_now,
        nullable=False,
    )


class TimestampMixin(CreatedMixin):
    """Mixin for unix ``created`` and ``updated`` timestamps."""

    updated: Mapped[int] = mapped_column(
        BigInteger,
        default=unix_now,
        nullable=False,
    )


__all__ = ["Base", "CreatedMixin", "TimestampMixin", "unix_now"]
