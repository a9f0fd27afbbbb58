"""GuardrailRepository Port - Guardrail Store."""

from abc import ABC, abstractmethod

from ..value_objects import Guardrail


class GuardrailRepository(ABC):
    """Per-follower allocation rules.

    A follower has at most one guardrail per symbol and one global guardrail.
    """

    @abstractmethod
    async def get_for_follower(self, follower_id: int) -> list[Guardrail]:
        pass

    @abstractmethod
    async def replace(self, guardrail: Guardrail) -> None:
        """Store the guardrail, replacing any rule for the same symbol."""
        pass

    @abstractmethod
    async def delete(self, follower_id: int, symbol: str | None) -> bool:
        """Remove the rule for ``symbol`` (None = global).

        Returns:
            True if a rule was removed.
        """
        pass
