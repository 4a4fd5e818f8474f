"""Host probes backing the built-in conditions.

Every probe that starts a process or opens a connection is bounded by a
timeout and never reads from stdin. Scratch files live in a directory that
is removed before the probe returns.
"""

import logging
import os
import shutil
import socket
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from .errors import EvaluationError

logger = logging.getLogger(__name__)

_PROBE_ENV_OVERRIDES = {
    "GIT_TERMINAL_PROMPT": "0",
    "GIT_ASKPASS": "",
    "SSH_ASKPASS": "",
}


@dataclass
class BuildInfo:
    """Build metadata embedded in a Go binary."""

    path: str = ""
    main: str = ""
    settings: list[tuple[str, str]] = field(default_factory=list)

    def setting(self, key: str) -> str | None:
        for k, v in self.settings:
            if k == key:
                return v
        return None


def _run(cmd: list[str], timeout: float) -> subprocess.CompletedProcess | None:
    """Run a command non-interactively; None if it could not run in time."""
    env = {**os.environ, **_PROBE_ENV_OVERRIDES}
    try:
        return subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
        )
    except subprocess.TimeoutExpired:
        logger.warning("probe %s timed out after %ss", cmd[0], timeout)
        return None
    except OSError as e:
        logger.debug("probe %s could not start: %s", cmd[0], e)
        return None


def look_path(name: str) -> bool:
    """Whether name resolves to an executable on PATH."""
    return shutil.which(name) is not None


def is_case_sensitive(work_dir: str) -> bool:
    """Whether the filesystem holding work_dir distinguishes FILE from file.

    Raises:
        EvaluationError: If the probe files cannot be created or read
    """
    try:
        tmpdir = tempfile.mkdtemp(prefix="case-sensitive", dir=work_dir)
    except OSError as e:
        raise EvaluationError(
            f"failed to create directory to determine case-sensitivity: {e}", cause=e
        ) from e

    try:
        try:
            Path(tmpdir, "FILE").write_bytes(b"")
        except OSError as e:
            raise EvaluationError(
                f"error writing file to determine case-sensitivity: {e}", cause=e
            ) from e

        try:
            Path(tmpdir, "file").read_bytes()
        except FileNotFoundError:
            return True
        except OSError as e:
            raise EvaluationError(
                f"unexpected error reading file when determining case-sensitivity: {e}",
                cause=e,
            ) from e
        return False
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


def parse_build_info(text: str) -> BuildInfo | None:
    """Parse the output of `go version -m`.

    Returns None when the output carries no module or build lines.
    """
    info = BuildInfo()
    found = False
    for line in text.splitlines():
        fields = line.strip().split("\t")
        if len(fields) < 2:
            continue
        match fields[0]:
            case "path":
                info.path = fields[1]
                found = True
            case "mod":
                info.main = fields[1]
                found = True
            case "build":
                key, _, value = fields[1].partition("=")
                info.settings.append((key, value))
                found = True
    return info if found else None


def read_build_info(go_binary: str | None, timeout: float = 10.0) -> BuildInfo | None:
    """Read the build settings embedded in the go command itself."""
    if not go_binary:
        return None
    result = _run([go_binary, "version", "-m", go_binary], timeout)
    if result is None or result.returncode != 0:
        return None
    return parse_build_info(result.stdout)


def go_env(go_binary: str | None, name: str, timeout: float = 10.0) -> str:
    """Value of `go env name`, or "" if the go command is unavailable."""
    if not go_binary:
        return ""
    result = _run([go_binary, "env", name], timeout)
    if result is None or result.returncode != 0:
        return ""
    return result.stdout.strip()


def has_working_git(goos: str, timeout: float = 10.0) -> bool:
    """Whether a git executable with the standard CLI is available."""
    if goos == "plan9":
        # The git command on Plan 9 is usually not the real git.
        return False
    git = shutil.which("git")
    if git is None:
        return False
    result = _run([git, "--version"], timeout)
    return result is not None and result.returncode == 0


def has_link(goos: str, go_binary: str | None) -> bool:
    """Whether the toolchain can link binaries on this host."""
    if goos in ("android", "ios", "js", "wasip1"):
        return False
    return go_binary is not None


def has_symlink(work_dir: str) -> bool:
    """Whether the current user can create symbolic links in work_dir."""
    try:
        with tempfile.TemporaryDirectory(prefix="symlink", dir=work_dir) as tmpdir:
            os.symlink("target", os.path.join(tmpdir, "link"))
    except (OSError, NotImplementedError) as e:
        logger.debug("symlink probe failed: %s", e)
        return False
    return True


def has_hard_link(work_dir: str) -> bool:
    """Whether the filesystem holding work_dir supports hard links."""
    try:
        with tempfile.TemporaryDirectory(prefix="hardlink", dir=work_dir) as tmpdir:
            target = os.path.join(tmpdir, "target")
            Path(target).write_bytes(b"")
            os.link(target, os.path.join(tmpdir, "link"))
    except (OSError, NotImplementedError) as e:
        logger.debug("hard link probe failed: %s", e)
        return False
    return True


def has_external_network(
    goos: str,
    short: bool,
    host: str = "golang.org",
    timeout: float = 10.0,
) -> bool:
    """Whether external network connections are allowed and working."""
    if short or goos in ("js", "wasip1"):
        return False
    try:
        with socket.create_connection((host, 443), timeout=timeout):
            return True
    except OSError as e:
        logger.debug("external network probe failed: %s", e)
        return False


def is_root() -> bool:
    """Whether the process runs with an effective uid of 0."""
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0
