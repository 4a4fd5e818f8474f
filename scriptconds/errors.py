"""scriptconds error types and exit codes."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes for the scriptconds CLI."""

    SUCCESS = 0
    RUNTIME_ERROR = 1
    VALIDATION_ERROR = 2


class ScriptCondError(Exception):
    """Base error for all scriptconds errors."""

    exit_code: ExitCode = ExitCode.RUNTIME_ERROR


class ParseError(ScriptCondError):
    """Malformed condition guard on a script line."""

    exit_code = ExitCode.VALIDATION_ERROR


class ValidationError(ScriptCondError):
    """A condition is registered or referenced incorrectly."""

    exit_code = ExitCode.VALIDATION_ERROR


class DuplicateNameError(ValidationError):
    """A condition name was registered twice.

    This always indicates a programming error in the condition set and is
    never recovered from.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"condition {name!r} is already registered")


class UnknownConditionError(ValidationError):
    """A guard names a condition that is not registered."""

    def __init__(self, name: str, prefix: bool = False):
        self.name = name
        kind = "condition prefix" if prefix else "condition"
        super().__init__(f"unknown {kind} {name!r}")


class EvaluationError(ScriptCondError):
    """A condition could not be evaluated.

    Wraps the underlying I/O, subprocess or parse failure. Distinct from a
    condition that evaluated to false.
    """

    exit_code = ExitCode.RUNTIME_ERROR

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class UnrecognizedValueError(EvaluationError):
    """A parameterized condition's suffix names something unknown."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"unrecognized {kind} {value!r}")


class ExperimentParseError(EvaluationError):
    """The GOEXPERIMENT value could not be parsed."""

    pass


class ConditionError(ScriptCondError):
    """Error evaluating a condition guard on a script line.

    Wraps the underlying cause and records which guard failed.
    """

    exit_code = ExitCode.RUNTIME_ERROR

    def __init__(self, tag: str, cause: Exception):
        self.tag = tag
        self.cause = cause

        # Inherit exit code from cause if it's a ScriptCondError
        if isinstance(cause, ScriptCondError):
            self.exit_code = cause.exit_code

        super().__init__(f"evaluating condition [{tag}]: {cause}")
