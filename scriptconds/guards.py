"""Condition guards on script lines.

A script line may start with any number of guards:

    [name]          run only if the condition holds
    [!name]         run only if the condition does not hold
    [name:suffix]   run only if the prefix condition holds for suffix

All guards on a line must match for the line to run.
"""

import logging
from dataclasses import dataclass, field

from .conditions import Condition
from .errors import (
    ConditionError,
    ParseError,
    ScriptCondError,
    UnknownConditionError,
    ValidationError,
)
from .registry import ConditionRegistry
from .state import ScriptState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Guard:
    """A single [tag] or [!tag] guard."""

    tag: str
    want: bool = True

    @property
    def name(self) -> str:
        return self.tag.partition(":")[0]

    @property
    def suffix(self) -> str:
        return self.tag.partition(":")[2]

    @property
    def has_suffix(self) -> bool:
        return ":" in self.tag

    def __str__(self) -> str:
        return f"[{'' if self.want else '!'}{self.tag}]"


@dataclass
class LineDecision:
    """Outcome of evaluating the guards on one script line."""

    run: bool
    command: str
    guards: list[Guard] = field(default_factory=list)
    blocked_by: Guard | None = None
    summary: str = ""  # summary of the blocking condition


def parse_guard(word: str) -> Guard:
    """Parse one bracketed word into a Guard."""
    if len(word) < 2 or not (word.startswith("[") and word.endswith("]")):
        raise ParseError(f"malformed condition guard {word!r}")
    tag = word[1:-1]
    want = True
    if tag.startswith("!"):
        want = False
        tag = tag[1:]
    if not tag or not tag.partition(":")[0]:
        raise ParseError(f"empty condition in guard {word!r}")
    if "[" in tag or "]" in tag or "!" in tag:
        raise ParseError(f"malformed condition guard {word!r}")
    return Guard(tag=tag, want=want)


def parse_guards(line: str) -> tuple[list[Guard], str]:
    """Split the leading guards off a script line.

    Returns:
        The guards in order and the remaining command text
    """
    guards: list[Guard] = []
    rest = line.strip()
    while rest.startswith("["):
        word, *tail = rest.split(None, 1)
        if not word.endswith("]"):
            raise ParseError(f"unterminated condition guard {word!r}")
        guards.append(parse_guard(word))
        rest = tail[0] if tail else ""
    return guards, rest


class GuardEvaluator:
    """Evaluates guards against a registry and a script state."""

    def __init__(self, registry: ConditionRegistry):
        self.registry = registry

    def condition_for(self, guard: Guard) -> Condition:
        """Resolve the condition a guard refers to.

        Raises:
            UnknownConditionError: If no condition has the guard's name
            ValidationError: If the guard's use of a suffix does not match
                whether the condition is a prefix condition
        """
        cond, found = self.registry.lookup(guard.name)
        if not found:
            raise UnknownConditionError(guard.name, prefix=guard.has_suffix)
        if guard.has_suffix and not cond.prefix:
            raise ValidationError(f"condition {guard.name!r} cannot be used with a suffix")
        if not guard.has_suffix and cond.prefix:
            raise ValidationError(f"condition {guard.name!r} requires a suffix")
        return cond

    def check(self, state: ScriptState, guard: Guard) -> bool:
        """Whether a single guard matches (the condition result equals want)."""
        cond = self.condition_for(guard)
        try:
            result = cond.evaluate(state, guard.suffix)
        except ScriptCondError as e:
            raise ConditionError(guard.tag, e) from e
        logger.debug("condition %s evaluated to %s", guard, result)
        return result == guard.want

    def active(self, state: ScriptState, guards: list[Guard]) -> bool:
        """Whether every guard matches. Stops at the first that does not."""
        return self._first_blocking(state, guards) is None

    def evaluate_line(self, state: ScriptState, line: str) -> LineDecision:
        """Parse and evaluate the guards of a script line."""
        guards, command = parse_guards(line)
        blocked = self._first_blocking(state, guards)
        if blocked is None:
            return LineDecision(run=True, command=command, guards=guards)

        summary = self.registry.get(blocked.name).summary
        logger.debug("skipping %r: %s is not satisfied", command, blocked)
        return LineDecision(
            run=False,
            command=command,
            guards=guards,
            blocked_by=blocked,
            summary=summary,
        )

    def _first_blocking(self, state: ScriptState, guards: list[Guard]) -> Guard | None:
        for guard in guards:
            if not self.check(state, guard):
                return guard
        return None
