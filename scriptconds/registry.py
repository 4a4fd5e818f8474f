"""Registry of named script conditions."""

from collections.abc import Iterator, Mapping

from .conditions import Condition, CondUsage
from .errors import DuplicateNameError, ValidationError


class ConditionRegistry:
    """Append-only mapping from condition name to Condition.

    Built once before any script runs and then shared read-only by every
    script in the process.
    """

    def __init__(self) -> None:
        self._conditions: dict[str, Condition] = {}

    @classmethod
    def from_mapping(cls, conditions: Mapping[str, Condition]) -> "ConditionRegistry":
        registry = cls()
        for name, cond in conditions.items():
            registry.register(name, cond)
        return registry

    def register(self, name: str, cond: Condition) -> None:
        """Register a condition.

        Args:
            name: Name used in [name] and [name:suffix] guards
            cond: The condition to register

        Raises:
            DuplicateNameError: If name is already registered
            ValidationError: If name is empty or not usable in a guard
        """
        if not name or any(c in name for c in ":[]! \t"):
            raise ValidationError(f"invalid condition name {name!r}")
        if name in self._conditions:
            raise DuplicateNameError(name)
        self._conditions[name] = cond

    def lookup(self, name: str) -> tuple[Condition | None, bool]:
        """Return the condition for name and whether it was found."""
        cond = self._conditions.get(name)
        return cond, cond is not None

    def get(self, name: str) -> Condition | None:
        return self._conditions.get(name)

    def names(self) -> list[str]:
        return sorted(self._conditions)

    def items(self) -> list[tuple[str, Condition]]:
        return [(name, self._conditions[name]) for name in self.names()]

    def usage(self) -> list[tuple[str, CondUsage]]:
        """Help entries sorted by name; prefix conditions are shown as name:*."""
        entries = []
        for name, cond in self.items():
            usage = cond.usage
            entries.append((f"{name}:*" if usage.prefix else name, usage))
        return entries

    def __contains__(self, name: object) -> bool:
        return name in self._conditions

    def __len__(self) -> int:
        return len(self._conditions)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())
