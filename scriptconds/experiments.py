"""GOEXPERIMENT parsing."""

from dataclasses import dataclass, field

from .errors import ExperimentParseError

# Experiment names in declaration order. ExperimentFlags.all() preserves it.
EXPERIMENTS = (
    "fieldtrack",
    "preemptibleloops",
    "staticlockranking",
    "boringcrypto",
    "regabiwrappers",
    "regabiargs",
    "heapminimum512kib",
    "coverageredesign",
    "arenas",
    "cgocheck2",
    "loopvar",
    "cacheprog",
    "newinliner",
    "rangefunc",
    "aliastypeparams",
    "swissmap",
    "spinbitmutex",
    "synchashtriemap",
    "synctest",
)

_REGABI_ARCHES = frozenset({"amd64", "arm64", "loong64", "ppc64", "ppc64le", "riscv64"})


@dataclass
class ExperimentFlags:
    """Resolved experiment settings for one GOOS/GOARCH."""

    flags: dict[str, bool] = field(default_factory=dict)
    baseline: dict[str, bool] = field(default_factory=dict)

    def all(self) -> list[str]:
        """Every experiment, disabled ones prefixed by "no"."""
        return [name if self.flags.get(name) else f"no{name}" for name in EXPERIMENTS]

    def enabled(self) -> list[str]:
        return [name for name in EXPERIMENTS if self.flags.get(name)]

    def is_enabled(self, name: str) -> bool:
        return bool(self.flags.get(name))

    def __str__(self) -> str:
        """Settings that differ from the platform baseline, GOEXPERIMENT style."""
        deltas = []
        for name in EXPERIMENTS:
            value = bool(self.flags.get(name))
            if value != bool(self.baseline.get(name)):
                deltas.append(name if value else f"no{name}")
        return ",".join(deltas)


def baseline_experiments(goos: str, goarch: str) -> dict[str, bool]:
    """Experiments enabled by default on goos/goarch."""
    regabi = goarch in _REGABI_ARCHES
    flags = dict.fromkeys(EXPERIMENTS, False)
    flags.update(
        regabiwrappers=regabi,
        regabiargs=regabi,
        coverageredesign=True,
        aliastypeparams=True,
        swissmap=True,
        spinbitmutex=True,
        synchashtriemap=True,
    )
    return flags


def parse_goexperiment(goos: str, goarch: str, goexp: str) -> ExperimentFlags:
    """Parse a GOEXPERIMENT value on top of the goos/goarch baseline.

    The value is a comma-separated list of experiment names, each optionally
    prefixed by "no" to disable it. "none" disables everything, including
    baseline experiments. "regabi" toggles both regabi experiments.

    Raises:
        ExperimentParseError: If the value names an unknown experiment
    """
    baseline = baseline_experiments(goos, goarch)
    flags = dict(baseline)

    for item in goexp.split(","):
        item = item.strip()
        if not item:
            continue
        if item == "none":
            flags = dict.fromkeys(EXPERIMENTS, False)
            continue
        value = True
        if item.startswith("no"):
            item, value = item[2:], False
        if item == "regabi":
            flags["regabiwrappers"] = flags["regabiargs"] = value
        elif item in flags:
            flags[item] = value
        else:
            raise ExperimentParseError(f"unknown GOEXPERIMENT {item}")

    # regabi is always on where supported and unavailable elsewhere.
    regabi = goarch in _REGABI_ARCHES
    flags["regabiwrappers"] = flags["regabiargs"] = regabi

    return ExperimentFlags(flags=flags, baseline=baseline)
