"""Condition descriptors and the strategies that build them.

A Condition is a tagged variant: its kind fixes the calling convention of
its function and its cache policy fixes how often that function runs.

    bool_condition    fixed value known at registration
    condition         function of the script state, run on every use
    prefix_condition  function of the state and a [name:suffix] suffix
    once_condition    zero-argument function run at most once per process
    cached_condition  function of the suffix run at most once per suffix

Condition functions return a bool or raise. Raising is how a condition
reports that it could not be evaluated; it is never turned into False.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import EvaluationError, ScriptCondError, ValidationError
from .once import OnceCell, OnceMap
from .state import ScriptState


class CondKind(Enum):
    """Calling convention of a condition function."""

    STATELESS = "stateless"  # func() -> bool
    STATE_DEPENDENT = "state"  # func(state) -> bool
    PARAMETERIZED = "prefix"  # func(state, suffix) -> bool


class CachePolicy(Enum):
    """How results of a condition function are reused."""

    NONE = "none"
    COMPUTE_ONCE = "once"
    PER_SUFFIX = "per_suffix"


@dataclass(frozen=True)
class CondUsage:
    """Help text for a condition."""

    summary: str
    prefix: bool = False


@dataclass(frozen=True)
class Condition:
    """A predicate that gates execution of a script line."""

    summary: str
    kind: CondKind
    func: Callable[..., Any]
    cache: CachePolicy = CachePolicy.NONE
    _once: OnceCell = field(default_factory=OnceCell, init=False, repr=False, compare=False)
    _per_suffix: OnceMap = field(default_factory=OnceMap, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.cache is CachePolicy.COMPUTE_ONCE and self.kind is not CondKind.STATELESS:
            raise ValidationError("compute-once conditions must take no arguments")
        if self.cache is CachePolicy.PER_SUFFIX and self.kind is not CondKind.PARAMETERIZED:
            raise ValidationError("per-suffix caching requires a prefix condition")

    @property
    def usage(self) -> CondUsage:
        return CondUsage(summary=self.summary, prefix=self.kind is CondKind.PARAMETERIZED)

    @property
    def prefix(self) -> bool:
        """Whether the condition must be written as [name:suffix]."""
        return self.kind is CondKind.PARAMETERIZED

    def evaluate(self, state: ScriptState, suffix: str = "") -> bool:
        """Evaluate the condition.

        Args:
            state: Current script state
            suffix: Text after the colon in [name:suffix], "" for plain guards

        Returns:
            Whether the condition holds

        Raises:
            EvaluationError: If the condition could not be evaluated
        """
        match self.cache:
            case CachePolicy.COMPUTE_ONCE:
                return self._once.get(lambda: self._invoke(state, suffix))
            case CachePolicy.PER_SUFFIX:
                return self._per_suffix.get(suffix, lambda: self._invoke(state, suffix))
        return self._invoke(state, suffix)

    def _invoke(self, state: ScriptState, suffix: str) -> bool:
        try:
            match self.kind:
                case CondKind.STATELESS:
                    result = self.func()
                case CondKind.STATE_DEPENDENT:
                    result = self.func(state)
                case CondKind.PARAMETERIZED:
                    result = self.func(state, suffix)
        except ScriptCondError:
            raise
        except Exception as e:
            raise EvaluationError(str(e) or type(e).__name__, cause=e) from e
        return bool(result)


def bool_condition(summary: str, value: bool) -> Condition:
    """Condition with a value fixed when the registry is built."""
    value = bool(value)
    return Condition(summary, CondKind.STATELESS, lambda: value)


def condition(summary: str, func: Callable[[ScriptState], bool]) -> Condition:
    """Condition computed from the script state on every evaluation."""
    return Condition(summary, CondKind.STATE_DEPENDENT, func)


def prefix_condition(summary: str, func: Callable[[ScriptState, str], bool]) -> Condition:
    """Condition written as [name:suffix]; func receives only the suffix."""
    return Condition(summary, CondKind.PARAMETERIZED, func)


def once_condition(summary: str, func: Callable[[], bool]) -> Condition:
    """Condition whose function runs at most once; its outcome is replayed."""
    return Condition(summary, CondKind.STATELESS, func, CachePolicy.COMPUTE_ONCE)


def cached_condition(summary: str, func: Callable[[str], bool]) -> Condition:
    """Prefix condition whose function runs at most once per suffix."""
    return Condition(
        summary,
        CondKind.PARAMETERIZED,
        lambda _state, suffix: func(suffix),
        CachePolicy.PER_SUFFIX,
    )


def lazy_bool(summary: str, func: Callable[[], bool]) -> Condition:
    """once_condition for probes that cannot fail."""
    return once_condition(summary, func)
