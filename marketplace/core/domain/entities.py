"""
Identity-bearing domain objects.

Carts and orders build on these: equality follows the identifier, and
aggregates carry the version number used for optimistic locking.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Generic, TypeVar
from uuid import UUID, uuid4

TId = TypeVar("TId")


def utcnow() -> datetime:
    """Timezone-aware current time used for every domain timestamp."""
    return datetime.now(UTC)


@dataclass
class Entity(ABC, Generic[TId]):
    """
    Object whose identity outlives changes to its attributes.

    Two entities compare equal only when both have been given an ``id``
    and the ids match.
    """

    id: TId | None = field(default=None)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity) or self.id is None or other.id is None:
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        # Unsaved entities fall back to object identity
        return hash(self.id) if self.id is not None else id(self)

    def touch(self) -> None:
        """Stamp ``updated_at`` with the current time."""
        self.updated_at = utcnow()


@dataclass
class AggregateRoot(Entity[TId], Generic[TId]):
    """
    Consistency boundary; all changes to members go through the root.

    ``version`` is the optimistic concurrency token: repositories persist
    an aggregate only if the stored version still equals the one that was
    loaded, then bump it.
    """

    version: int = field(default=0)

    def increment_version(self) -> None:
        self.version += 1


def generate_uuid() -> UUID:
    return uuid4()


__all__ = [
    "Entity",
    "AggregateRoot",
    "generate_uuid",
    "utcnow",
]
