"""Shared test fixtures and fakes for scriptconds tests."""

from pathlib import Path

import pytest

from scriptconds import ConditionRegistry, HostConfig, ScriptState, Toolchain, register_all
from scriptconds.experiments import EXPERIMENTS, ExperimentFlags
from scriptconds.probes import BuildInfo


class FakeToolchain(Toolchain):
    """Toolchain whose probes never touch the host.

    Each probe records how often it ran so tests can check caching.
    """

    def __init__(self, **overrides) -> None:
        super().__init__(
            look_path=self._look_path,
            is_case_sensitive=self._is_case_sensitive,
            read_build_info=self._read_build_info,
            has_cgo=lambda config: True,
            has_working_git=self._has_working_git,
            has_link=lambda goos, go_binary: True,
            has_symlink=lambda work_dir: True,
            has_hard_link=lambda work_dir: True,
            has_external_network=lambda goos, short, timeout=None: False,
            is_root=lambda: False,
        )
        self.calls: dict[str, int] = {}
        self.executables = {"gcc", "/usr/bin/gcc"}
        self.case_sensitive = True
        self.build_info: BuildInfo | None = BuildInfo(
            path="cmd/go", settings=[("-trimpath", "true"), ("GOOS", "linux")]
        )
        for name, value in overrides.items():
            setattr(self, name, value)

    def _count(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1

    def _look_path(self, name: str) -> bool:
        self._count("look_path")
        return name in self.executables

    def _is_case_sensitive(self, work_dir: str) -> bool:
        self._count("is_case_sensitive")
        return self.case_sensitive

    def _read_build_info(self, go_binary, timeout=None) -> BuildInfo | None:
        self._count("read_build_info")
        return self.build_info

    def _has_working_git(self, goos: str, timeout=None) -> bool:
        self._count("has_working_git")
        return goos != "plan9"


@pytest.fixture
def host_config(tmp_path: Path) -> HostConfig:
    """A linux/amd64 host with cgo and a fixed GOROOT."""
    return HostConfig(
        goos="linux",
        goarch="amd64",
        goroot="/usr/local/go",
        work_dir=str(tmp_path),
        go_binary="/usr/local/go/bin/go",
        cgo_enabled=True,
    )


@pytest.fixture
def make_toolchain():
    """Factory for FakeToolchain instances with attribute overrides."""
    return FakeToolchain


@pytest.fixture
def toolchain(make_toolchain) -> FakeToolchain:
    return make_toolchain()


@pytest.fixture
def registry(host_config: HostConfig, toolchain: FakeToolchain) -> ConditionRegistry:
    return register_all(host_config, toolchain)


@pytest.fixture
def state(host_config: HostConfig) -> ScriptState:
    return ScriptState.for_host(host_config, {})


@pytest.fixture
def flags_with():
    """Factory for ExperimentFlags with exactly the given experiments enabled."""

    def make(enabled: set[str]) -> ExperimentFlags:
        flags = {name: name in enabled for name in EXPERIMENTS}
        return ExperimentFlags(flags=flags, baseline=dict.fromkeys(EXPERIMENTS, False))

    return make
