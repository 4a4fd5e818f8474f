"""Built-in conditions for go command script tests."""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial

from . import capability, experiments, probes
from .conditions import (
    Condition,
    bool_condition,
    cached_condition,
    condition,
    lazy_bool,
    once_condition,
    prefix_condition,
)
from .config import HostConfig
from .errors import EvaluationError, UnrecognizedValueError
from .experiments import ExperimentFlags
from .probes import BuildInfo
from .registry import ConditionRegistry
from .state import ScriptState

logger = logging.getLogger(__name__)


def _probe_cgo(config: HostConfig) -> bool:
    if config.cgo_enabled is not None:
        return config.cgo_enabled
    return probes.go_env(config.go_binary, "CGO_ENABLED", config.probe_timeout) == "1"


@dataclass
class Toolchain:
    """Sources of facts the built-in conditions consult.

    Defaults query the real platform tables and host. Tests replace
    individual fields with fakes.
    """

    build_mode_supported: Callable[[str, str, str, str], bool] = capability.build_mode_supported
    race_supported: Callable[[str, str], bool] = capability.race_detector_supported
    msan_supported: Callable[[str, str], bool] = capability.msan_supported
    asan_supported: Callable[[str, str], bool] = capability.asan_supported
    fuzz_supported: Callable[[str, str], bool] = capability.fuzz_supported
    fuzz_instrumented: Callable[[str, str], bool] = capability.fuzz_instrumented
    default_cc: Callable[[str, str], str] = capability.default_cc
    parse_goexperiment: Callable[[str, str, str], ExperimentFlags] = experiments.parse_goexperiment
    look_path: Callable[[str], bool] = probes.look_path
    is_case_sensitive: Callable[[str], bool] = probes.is_case_sensitive
    read_build_info: Callable[..., BuildInfo | None] = probes.read_build_info
    has_cgo: Callable[[HostConfig], bool] = _probe_cgo
    has_working_git: Callable[..., bool] = probes.has_working_git
    has_link: Callable[[str, str | None], bool] = probes.has_link
    has_symlink: Callable[[str], bool] = probes.has_symlink
    has_hard_link: Callable[[str], bool] = probes.has_hard_link
    has_external_network: Callable[..., bool] = probes.has_external_network
    is_root: Callable[[], bool] = probes.is_root


def _goos_goarch(state: ScriptState) -> tuple[str, str]:
    return state.getenv("GOOS"), state.getenv("GOARCH")


def _matches_known(kind: str, current: str, known: frozenset[str], _state: ScriptState, value: str) -> bool:
    if value == current:
        return True
    if value not in known:
        raise UnrecognizedValueError(kind, value)
    return False


def default_conditions(config: HostConfig, toolchain: Toolchain) -> dict[str, Condition]:
    """Conditions every script engine provides, independent of the go command."""
    return {
        "GOOS": prefix_condition(
            "runtime.GOOS == <suffix>",
            partial(_matches_known, "GOOS", config.goos, capability.KNOWN_OS),
        ),
        "GOARCH": prefix_condition(
            "runtime.GOARCH == <suffix>",
            partial(_matches_known, "GOARCH", config.goarch, capability.KNOWN_ARCH),
        ),
        "compiler": prefix_condition(
            "runtime.Compiler == <suffix>",
            partial(_matches_known, "compiler", config.compiler, capability.KNOWN_COMPILERS),
        ),
        "exec": cached_condition(
            "<suffix> names an executable in the test binary's PATH",
            toolchain.look_path,
        ),
        "short": bool_condition("tests are running in short mode", config.short),
        "verbose": bool_condition("tests are running in verbose mode", config.verbose),
        "root": bool_condition("os.Geteuid() == 0", toolchain.is_root()),
    }


def sys_condition(
    flag: str,
    supported: Callable[[str, str], bool],
    needs_cgo: bool,
    config: HostConfig,
    has_cgo: bool,
) -> Condition:
    """Condition that the script's GOOS/GOARCH supports a build flag.

    Flags that need cgo also require native (non-cross) compilation with
    cgo enabled; that gate is checked before the capability table.
    """

    def check(state: ScriptState) -> bool:
        goos, goarch = _goos_goarch(state)
        if needs_cgo:
            cross = config.host_goos != goos or config.host_goarch != goarch
            if cross or not has_cgo:
                return False
        return supported(goos, goarch)

    return condition(f"GOOS/GOARCH supports {flag}", check)


def default_cc_is_absolute(config: HostConfig, toolchain: Toolchain, state: ScriptState) -> bool:
    goos, goarch = _goos_goarch(state)
    cc = config.cc or toolchain.default_cc(goos, goarch)
    return os.path.isabs(cc) and toolchain.look_path(cc)


def is_mismatched_goroot(config: HostConfig, state: ScriptState) -> bool:
    goroot_final = state.getenv("GOROOT_FINAL")
    if goroot_final == "":
        goroot_final = state.getenv("GOROOT")
    return goroot_final != config.goroot


def has_buildmode(config: HostConfig, toolchain: Toolchain, state: ScriptState, mode: str) -> bool:
    goos, goarch = _goos_goarch(state)
    return toolchain.build_mode_supported(config.compiler, mode, goos, goarch)


def has_godebug(state: ScriptState, value: str) -> bool:
    """Whether GODEBUG has an entry exactly equal to value."""
    godebug = state.getenv("GODEBUG")
    return any(p.strip() == value for p in godebug.split(","))


def has_goexperiment(
    parse: Callable[[str, str, str], ExperimentFlags],
    state: ScriptState,
    value: str,
) -> bool:
    """Whether experiment value is enabled for the script's GOOS/GOARCH.

    A disabled experiment is false. A name that is not an experiment at
    all, with or without a "no" prefix, is an error.
    """
    goos, goarch = _goos_goarch(state)
    flags = parse(goos, goarch, state.getenv("GOEXPERIMENT"))
    for exp in flags.all():
        if value == exp:
            return True
        if value.removeprefix("no") == exp.removeprefix("no"):
            return False
    raise UnrecognizedValueError("GOEXPERIMENT", value)


def is_trimpath(config: HostConfig, toolchain: Toolchain) -> bool:
    info = toolchain.read_build_info(config.go_binary, config.probe_timeout)
    if info is None:
        raise EvaluationError("missing build info")
    return any(k == "-trimpath" and v == "true" for k, v in info.settings)


def register_all(
    config: HostConfig | None = None,
    toolchain: Toolchain | None = None,
) -> ConditionRegistry:
    """Build a registry holding the default and go command conditions.

    Args:
        config: Host configuration (default: read from the environment)
        toolchain: Fact sources (default: the real platform and host)

    Raises:
        DuplicateNameError: If two built-in conditions share a name
    """
    config = config or HostConfig.from_environ()
    tc = toolchain or Toolchain()

    registry = ConditionRegistry.from_mapping(default_conditions(config, tc))
    add = registry.register

    cgo = tc.has_cgo(config)
    timeout = config.probe_timeout
    logger.debug(
        "registering conditions for %s/%s (host %s/%s, cgo=%s)",
        config.goos, config.goarch, config.host_goos, config.host_goarch, cgo,
    )

    add("abscc", condition(
        "default $CC path is absolute and exists",
        partial(default_cc_is_absolute, config, tc),
    ))
    add("asan", sys_condition("-asan", tc.asan_supported, True, config, cgo))
    add("buildmode", prefix_condition(
        "go supports -buildmode=<suffix>",
        partial(has_buildmode, config, tc),
    ))
    add("case-sensitive", once_condition(
        "$WORK filesystem is case-sensitive",
        partial(tc.is_case_sensitive, config.work_dir),
    ))
    add("cgo", bool_condition("host CGO_ENABLED", cgo))
    add("cross", bool_condition("cmd/go GOOS/GOARCH != GOHOSTOS/GOHOSTARCH", config.cross))
    add("fuzz", sys_condition("-fuzz", tc.fuzz_supported, False, config, cgo))
    add("fuzz-instrumented", sys_condition(
        "-fuzz with instrumentation", tc.fuzz_instrumented, False, config, cgo,
    ))
    add("git", lazy_bool(
        "the 'git' executable exists and provides the standard CLI",
        partial(tc.has_working_git, config.goos, timeout=timeout),
    ))
    add("GODEBUG", prefix_condition("GODEBUG contains <suffix>", has_godebug))
    add("GOEXPERIMENT", prefix_condition(
        "GOEXPERIMENT <suffix> is enabled",
        partial(has_goexperiment, tc.parse_goexperiment),
    ))
    add("hardlink", lazy_bool(
        "the $WORK filesystem supports hard links",
        partial(tc.has_hard_link, config.work_dir),
    ))
    add("link", lazy_bool(
        "the toolchain can link binaries on this host",
        partial(tc.has_link, config.goos, config.go_binary),
    ))
    add("mismatched-goroot", condition(
        "test's GOROOT_FINAL does not match the real GOROOT",
        partial(is_mismatched_goroot, config),
    ))
    add("msan", sys_condition("-msan", tc.msan_supported, True, config, cgo))
    add("net", lazy_bool(
        "external network connections are available",
        partial(tc.has_external_network, config.goos, config.short, timeout=timeout),
    ))
    add("race", sys_condition("-race", tc.race_supported, True, config, cgo))
    add("symlink", lazy_bool(
        "the current user can create symbolic links",
        partial(tc.has_symlink, config.work_dir),
    ))
    add("trimpath", once_condition(
        "test binary was built with -trimpath",
        partial(is_trimpath, config, tc),
    ))

    return registry
