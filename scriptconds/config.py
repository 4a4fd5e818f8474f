"""Host configuration for condition evaluation."""

import os
import platform
import shutil
import sys
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field

from .errors import ValidationError

# sys.platform prefix -> GOOS
_GOOS_BY_PLATFORM = [
    ("linux", "linux"),
    ("darwin", "darwin"),
    ("win32", "windows"),
    ("cygwin", "windows"),
    ("freebsd", "freebsd"),
    ("openbsd", "openbsd"),
    ("netbsd", "netbsd"),
    ("dragonfly", "dragonfly"),
    ("sunos", "solaris"),
    ("aix", "aix"),
    ("emscripten", "js"),
    ("wasi", "wasip1"),
]

# platform.machine() (lowercased) -> GOARCH
_GOARCH_BY_MACHINE = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i486": "386",
    "i586": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "armv8l": "arm",
    "ppc64": "ppc64",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "loongarch64": "loong64",
    "mips": "mips",
    "mipsel": "mipsle",
    "mips64": "mips64",
    "mips64el": "mips64le",
    "wasm32": "wasm",
}


def host_goos() -> str:
    """GOOS name of the platform this process is running on."""
    for prefix, goos in _GOOS_BY_PLATFORM:
        if sys.platform.startswith(prefix):
            return goos
    return sys.platform


def host_goarch() -> str:
    """GOARCH name of the machine this process is running on."""
    machine = platform.machine().lower()
    return _GOARCH_BY_MACHINE.get(machine, machine)


def _parse_bool(value: str | None) -> bool | None:
    if value is None or value.strip() == "":
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class HostConfig:
    """Facts about the process and the toolchain under test.

    Attributes:
        goos: GOOS of the running platform
        goarch: GOARCH of the running platform
        host_goos: GOHOSTOS reported for the toolchain under test
        host_goarch: GOHOSTARCH reported for the toolchain under test
        compiler: Go compiler name ("gc" or "gccgo")
        goroot: GOROOT the tests expect scripts to see
        work_dir: Directory in which filesystem probes create scratch dirs
        go_binary: Path of the go command whose build settings are inspected
        cc: Explicit C compiler override (CC)
        cgo_enabled: Explicit CGO_ENABLED override, None to probe
        short: Whether tests run in short mode
        verbose: Whether tests run in verbose mode
        probe_timeout: Seconds allowed for each external-process probe
    """

    goos: str = field(default_factory=host_goos)
    goarch: str = field(default_factory=host_goarch)
    host_goos: str = ""
    host_goarch: str = ""
    compiler: str = "gc"
    goroot: str = ""
    work_dir: str = field(default_factory=tempfile.gettempdir)
    go_binary: str | None = None
    cc: str | None = None
    cgo_enabled: bool | None = None
    short: bool = False
    verbose: bool = False
    probe_timeout: float = 10.0

    def __post_init__(self) -> None:
        if not self.host_goos:
            self.host_goos = self.goos
        if not self.host_goarch:
            self.host_goarch = self.goarch

    @property
    def cross(self) -> bool:
        """Whether the toolchain host differs from the running platform."""
        return self.host_goos != self.goos or self.host_goarch != self.goarch

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "HostConfig":
        """Build a config from environment variables.

        Reads GOHOSTOS, GOHOSTARCH, GOROOT, CC, CGO_ENABLED and the
        SCRIPTCONDS_* settings. Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ

        timeout = env.get("SCRIPTCONDS_PROBE_TIMEOUT", "").strip()
        try:
            probe_timeout = float(timeout) if timeout else 10.0
        except ValueError as e:
            raise ValidationError(f"invalid SCRIPTCONDS_PROBE_TIMEOUT {timeout!r}") from e

        return cls(
            host_goos=env.get("GOHOSTOS", ""),
            host_goarch=env.get("GOHOSTARCH", ""),
            compiler=env.get("SCRIPTCONDS_COMPILER", "") or "gc",
            goroot=env.get("GOROOT", ""),
            work_dir=env.get("SCRIPTCONDS_WORKDIR", "") or tempfile.gettempdir(),
            go_binary=env.get("SCRIPTCONDS_GO", "") or shutil.which("go"),
            cc=env.get("CC", "") or None,
            cgo_enabled=_parse_bool(env.get("CGO_ENABLED")),
            short=bool(_parse_bool(env.get("SCRIPTCONDS_SHORT"))),
            verbose=bool(_parse_bool(env.get("SCRIPTCONDS_VERBOSE"))),
            probe_timeout=probe_timeout,
        )
