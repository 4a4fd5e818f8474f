"""Tests for the built-in conditions."""

import pytest

from scriptconds import (
    DuplicateNameError,
    EvaluationError,
    ExperimentParseError,
    GuardEvaluator,
    HostConfig,
    ScriptState,
    UnrecognizedValueError,
    bool_condition,
    register_all,
)
from scriptconds.builtin import has_godebug, has_goexperiment, sys_condition
from scriptconds.probes import BuildInfo


EXPECTED_NAMES = {
    # defaults
    "GOOS", "GOARCH", "compiler", "exec", "short", "verbose", "root",
    # go command
    "abscc", "asan", "buildmode", "case-sensitive", "cgo", "cross", "fuzz",
    "fuzz-instrumented", "git", "GODEBUG", "GOEXPERIMENT", "hardlink", "link",
    "mismatched-goroot", "msan", "net", "race", "symlink", "trimpath",
}


class TestRegisterAll:
    def test_names(self, registry) -> None:
        assert set(registry.names()) == EXPECTED_NAMES

    def test_fresh_registry_each_call(self, host_config, toolchain) -> None:
        """Each call builds an independent registry."""
        first = register_all(host_config, toolchain)
        second = register_all(host_config, toolchain)
        assert first is not second
        assert first.get("trimpath") is not second.get("trimpath")

    def test_extending_with_existing_name_fails(self, registry) -> None:
        with pytest.raises(DuplicateNameError):
            registry.register("cgo", bool_condition("again", True))

    def test_every_condition_has_summary(self, registry) -> None:
        for name, usage in registry.usage():
            assert usage.summary, name


class TestGodebug:
    @pytest.mark.parametrize(
        "value,expected",
        [("bar", True), ("foo=1", True), ("baz", False), ("foo", False)],
    )
    def test_contains(self, value: str, expected: bool) -> None:
        state = ScriptState({"GODEBUG": "foo=1, bar"})
        assert has_godebug(state, value) is expected

    @pytest.mark.parametrize("value", ["bar", "foo=1", "x"])
    def test_empty(self, value: str) -> None:
        assert has_godebug(ScriptState({"GODEBUG": ""}), value) is False
        assert has_godebug(ScriptState(), value) is False

    def test_via_guard(self, registry) -> None:
        evaluator = GuardEvaluator(registry)
        state = ScriptState({"GODEBUG": "gotypesalias=1,http2debug=2"})
        assert evaluator.evaluate_line(state, "[GODEBUG:http2debug=2] go run .").run is True
        assert evaluator.evaluate_line(state, "[!GODEBUG:gotypesalias=1] go run .").run is False


class TestGoexperiment:
    def test_enabled(self, flags_with) -> None:
        parse = lambda goos, goarch, goexp: flags_with({"fieldtrack"})  # noqa: E731
        assert has_goexperiment(parse, ScriptState(), "fieldtrack") is True

    def test_negated_name_is_false(self, flags_with) -> None:
        """nofieldtrack matches fieldtrack with the opposite polarity."""
        parse = lambda goos, goarch, goexp: flags_with({"fieldtrack"})  # noqa: E731
        assert has_goexperiment(parse, ScriptState(), "nofieldtrack") is False

    def test_disabled_is_false(self, flags_with) -> None:
        parse = lambda goos, goarch, goexp: flags_with({"fieldtrack"})  # noqa: E731
        assert has_goexperiment(parse, ScriptState(), "arenas") is False
        assert has_goexperiment(parse, ScriptState(), "noarenas") is True

    def test_unknown_is_error(self, flags_with) -> None:
        parse = lambda goos, goarch, goexp: flags_with({"fieldtrack"})  # noqa: E731
        with pytest.raises(UnrecognizedValueError) as exc_info:
            has_goexperiment(parse, ScriptState(), "bogus")
        assert exc_info.value.value == "bogus"
        assert "GOEXPERIMENT" in str(exc_info.value)

    def test_parser_receives_state(self, flags_with) -> None:
        seen = []

        def parse(goos: str, goarch: str, goexp: str):
            seen.append((goos, goarch, goexp))
            return flags_with(set())

        state = ScriptState({"GOOS": "linux", "GOARCH": "arm64", "GOEXPERIMENT": "arenas"})
        has_goexperiment(parse, state, "noarenas")
        assert seen == [("linux", "arm64", "arenas")]

    def test_real_parser(self, registry) -> None:
        evaluator = GuardEvaluator(registry)
        state = ScriptState({"GOOS": "linux", "GOARCH": "amd64", "GOEXPERIMENT": "arenas"})
        assert evaluator.evaluate_line(state, "[GOEXPERIMENT:arenas] go build").run is True
        assert evaluator.evaluate_line(state, "[GOEXPERIMENT:fieldtrack] go build").run is False

    def test_parse_error_is_not_false(self, registry) -> None:
        cond = registry.get("GOEXPERIMENT")
        state = ScriptState({"GOOS": "linux", "GOARCH": "amd64", "GOEXPERIMENT": "nosuchthing"})
        with pytest.raises(ExperimentParseError):
            cond.evaluate(state, "arenas")


class TestSysCondition:
    def test_native_supported(self, host_config) -> None:
        cond = sys_condition("-race", lambda goos, goarch: True, True, host_config, True)
        assert cond.usage.summary == "GOOS/GOARCH supports -race"
        assert cond.evaluate(ScriptState({"GOOS": "linux", "GOARCH": "amd64"})) is True

    def test_cross_skips_capability_lookup(self, host_config) -> None:
        """Under cross-compilation the capability table is not consulted."""
        calls = []

        def supported(goos: str, goarch: str) -> bool:
            calls.append((goos, goarch))
            return True

        cond = sys_condition("-race", supported, True, host_config, True)
        assert cond.evaluate(ScriptState({"GOOS": "windows", "GOARCH": "amd64"})) is False
        assert calls == []

    def test_needs_cgo(self, host_config) -> None:
        cond = sys_condition("-msan", lambda goos, goarch: True, True, host_config, False)
        assert cond.evaluate(ScriptState({"GOOS": "linux", "GOARCH": "amd64"})) is False

    def test_no_cgo_needed(self, host_config) -> None:
        cond = sys_condition("-fuzz", lambda goos, goarch: goos == "windows", False, host_config, False)
        assert cond.evaluate(ScriptState({"GOOS": "windows", "GOARCH": "arm64"})) is True

    def test_follows_script_environment(self, registry, state) -> None:
        race = registry.get("race")
        assert race.evaluate(state) is True
        state.setenv("GOARCH", "386")
        assert race.evaluate(state) is False


class TestStateConditions:
    def test_buildmode(self, registry, state) -> None:
        buildmode = registry.get("buildmode")
        assert buildmode.evaluate(state, "pie") is True
        assert buildmode.evaluate(state, "nonsense") is False
        state.setenv("GOOS", "js")
        state.setenv("GOARCH", "wasm")
        assert buildmode.evaluate(state, "plugin") is False

    def test_buildmode_uses_toolchain(self, host_config, make_toolchain) -> None:
        seen = []

        def supported(compiler, mode, goos, goarch) -> bool:
            seen.append((compiler, mode, goos, goarch))
            return True

        registry = register_all(host_config, make_toolchain(build_mode_supported=supported))
        state = ScriptState({"GOOS": "plan9", "GOARCH": "arm"})
        assert registry.get("buildmode").evaluate(state, "shared") is True
        assert seen == [("gc", "shared", "plan9", "arm")]

    def test_abscc(self, host_config, make_toolchain) -> None:
        toolchain = make_toolchain(default_cc=lambda goos, goarch: "/usr/bin/gcc")
        registry = register_all(host_config, toolchain)
        assert registry.get("abscc").evaluate(ScriptState()) is True

        toolchain = make_toolchain(default_cc=lambda goos, goarch: "gcc")
        registry = register_all(host_config, toolchain)
        assert registry.get("abscc").evaluate(ScriptState()) is False

    def test_abscc_missing_executable(self, host_config, make_toolchain) -> None:
        toolchain = make_toolchain(default_cc=lambda goos, goarch: "/opt/cc/bin/clang")
        registry = register_all(host_config, toolchain)
        assert registry.get("abscc").evaluate(ScriptState()) is False

    def test_mismatched_goroot(self, registry) -> None:
        cond = registry.get("mismatched-goroot")
        assert cond.evaluate(ScriptState({"GOROOT": "/usr/local/go"})) is False
        assert cond.evaluate(ScriptState({"GOROOT": "/elsewhere"})) is True
        assert cond.evaluate(
            ScriptState({"GOROOT": "/elsewhere", "GOROOT_FINAL": "/usr/local/go"})
        ) is False
        assert cond.evaluate(ScriptState()) is True


class TestOnceConditions:
    def test_trimpath(self, registry, toolchain) -> None:
        cond = registry.get("trimpath")
        assert cond.evaluate(ScriptState()) is True
        assert cond.evaluate(ScriptState()) is True
        assert toolchain.calls["read_build_info"] == 1

    def test_trimpath_not_set(self, host_config, make_toolchain) -> None:
        toolchain = make_toolchain(build_info=BuildInfo(settings=[("-trimpath", "false")]))
        registry = register_all(host_config, toolchain)
        assert registry.get("trimpath").evaluate(ScriptState()) is False

    def test_trimpath_missing_build_info(self, host_config, make_toolchain) -> None:
        """Missing build metadata is an error, replayed on later lookups."""
        toolchain = make_toolchain(build_info=None)
        cond = register_all(host_config, toolchain).get("trimpath")

        with pytest.raises(EvaluationError, match="missing build info") as first:
            cond.evaluate(ScriptState())
        toolchain.build_info = BuildInfo(settings=[("-trimpath", "true")])
        with pytest.raises(EvaluationError) as second:
            cond.evaluate(ScriptState())

        assert first.value is second.value
        assert toolchain.calls["read_build_info"] == 1

    def test_case_sensitive_cached(self, registry, toolchain, state) -> None:
        cond = registry.get("case-sensitive")
        assert cond.evaluate(state) is True
        toolchain.case_sensitive = False
        state.setenv("GOOS", "darwin")
        assert cond.evaluate(state) is True
        assert toolchain.calls["is_case_sensitive"] == 1

    def test_git(self, registry, toolchain) -> None:
        assert registry.get("git").evaluate(ScriptState()) is True
        assert toolchain.calls["has_working_git"] == 1

    def test_git_plan9(self, tmp_path, make_toolchain) -> None:
        config = HostConfig(goos="plan9", goarch="amd64", work_dir=str(tmp_path), cgo_enabled=False)
        registry = register_all(config, make_toolchain())
        assert registry.get("git").evaluate(ScriptState()) is False

    def test_probe_flags(self, registry) -> None:
        state = ScriptState()
        assert registry.get("link").evaluate(state) is True
        assert registry.get("symlink").evaluate(state) is True
        assert registry.get("hardlink").evaluate(state) is True
        assert registry.get("net").evaluate(state) is False


class TestDefaultConditions:
    def test_goos(self, registry) -> None:
        cond = registry.get("GOOS")
        assert cond.evaluate(ScriptState(), "linux") is True
        assert cond.evaluate(ScriptState(), "windows") is False
        with pytest.raises(UnrecognizedValueError):
            cond.evaluate(ScriptState(), "linuxx")

    def test_goarch(self, registry) -> None:
        cond = registry.get("GOARCH")
        assert cond.evaluate(ScriptState(), "amd64") is True
        assert cond.evaluate(ScriptState(), "arm64") is False
        with pytest.raises(UnrecognizedValueError):
            cond.evaluate(ScriptState(), "x86_64")

    def test_compiler(self, registry) -> None:
        cond = registry.get("compiler")
        assert cond.evaluate(ScriptState(), "gc") is True
        assert cond.evaluate(ScriptState(), "gccgo") is False
        with pytest.raises(UnrecognizedValueError):
            cond.evaluate(ScriptState(), "tinygo")

    def test_exec_cached_per_name(self, registry, toolchain) -> None:
        cond = registry.get("exec")
        assert cond.evaluate(ScriptState(), "gcc") is True
        assert cond.evaluate(ScriptState(), "gcc") is True
        assert cond.evaluate(ScriptState(), "hg") is False
        assert toolchain.calls["look_path"] == 2

    def test_stateless_flags(self, registry) -> None:
        state = ScriptState()
        assert registry.get("cgo").evaluate(state) is True
        assert registry.get("cross").evaluate(state) is False
        assert registry.get("short").evaluate(state) is False
        assert registry.get("root").evaluate(state) is False

    def test_cross(self, tmp_path, make_toolchain) -> None:
        config = HostConfig(
            goos="linux", goarch="amd64", host_goos="darwin", host_goarch="arm64",
            work_dir=str(tmp_path), cgo_enabled=True,
        )
        registry = register_all(config, make_toolchain())
        assert registry.get("cross").evaluate(ScriptState()) is True
