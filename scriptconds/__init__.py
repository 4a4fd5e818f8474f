"""scriptconds - Condition evaluation for line-oriented test scripts."""

from .builtin import Toolchain, default_conditions, register_all
from .conditions import (
    CachePolicy,
    Condition,
    CondKind,
    CondUsage,
    bool_condition,
    cached_condition,
    condition,
    lazy_bool,
    once_condition,
    prefix_condition,
)
from .config import HostConfig
from .errors import (
    ConditionError,
    DuplicateNameError,
    EvaluationError,
    ExitCode,
    ExperimentParseError,
    ParseError,
    ScriptCondError,
    UnknownConditionError,
    UnrecognizedValueError,
    ValidationError,
)
from .guards import Guard, GuardEvaluator, LineDecision, parse_guards
from .once import OnceCell
from .registry import ConditionRegistry
from .state import ScriptState

__version__ = "0.1.0"

__all__ = [
    "register_all",
    "default_conditions",
    "Toolchain",
    "HostConfig",
    "ScriptState",
    "ConditionRegistry",
    "Condition",
    "CondKind",
    "CachePolicy",
    "CondUsage",
    "bool_condition",
    "condition",
    "prefix_condition",
    "once_condition",
    "cached_condition",
    "lazy_bool",
    "OnceCell",
    "Guard",
    "GuardEvaluator",
    "LineDecision",
    "parse_guards",
    "ScriptCondError",
    "ParseError",
    "ValidationError",
    "DuplicateNameError",
    "UnknownConditionError",
    "EvaluationError",
    "UnrecognizedValueError",
    "ExperimentParseError",
    "ConditionError",
    "ExitCode",
]
