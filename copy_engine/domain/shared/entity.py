"""Base Entity class for the domain model."""

from abc import ABC


class Entity(ABC):
    """Base class for domain entities.

    Entities are compared by identity, not by attribute values. Two unsaved
    entities (``id is None``) are only equal to themselves.

    Example:
        >>> order_a = CopyOrder(id=1, ...)
        >>> order_b = CopyOrder(id=1, ...)
        >>> order_a == order_b  # True (same ID)
    """

    def __init__(self, id: int | None = None) -> None:
        self._id = id

    @property
    def id(self) -> int | None:
        """Get entity ID."""
        return self._id

    @id.setter
    def id(self, value: int | None) -> None:
        # Assigned by the repository after INSERT
        self._id = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return False

        if self._id is None and other._id is None:
            return self is other

        return type(self) is type(other) and self._id == other._id

    def __hash__(self) -> int:
        if self._id is None:
            return hash(id(self))
        return hash((type(self).__name__, self._id))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id})"
