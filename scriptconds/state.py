"""Script state: the environment view conditions are evaluated against."""

from collections.abc import Mapping

from .config import HostConfig


class ScriptState:
    """Mutable environment of a running script.

    Scripts may change their environment between lines, so conditions that
    read it must be re-evaluated on every use.
    """

    def __init__(self, env: Mapping[str, str] | None = None):
        self._env: dict[str, str] = dict(env or {})

    @classmethod
    def for_host(
        cls,
        config: HostConfig,
        environ: Mapping[str, str] | None = None,
    ) -> "ScriptState":
        """Create a state seeded with the toolchain variables from config.

        Values in environ override the seeded ones.
        """
        env = {
            "GOOS": config.goos,
            "GOARCH": config.goarch,
            "GOHOSTOS": config.host_goos,
            "GOHOSTARCH": config.host_goarch,
        }
        if config.goroot:
            env["GOROOT"] = config.goroot
        if config.cgo_enabled is not None:
            env["CGO_ENABLED"] = "1" if config.cgo_enabled else "0"
        env.update(environ or {})
        return cls(env)

    def lookup_env(self, name: str) -> tuple[str, bool]:
        """Return the value of name and whether it is defined."""
        if name in self._env:
            return self._env[name], True
        return "", False

    def getenv(self, name: str) -> str:
        """Return the value of name, or "" when it is not defined."""
        return self._env.get(name, "")

    def setenv(self, name: str, value: str) -> None:
        self._env[name] = value

    def unsetenv(self, name: str) -> None:
        self._env.pop(name, None)

    def environ(self) -> list[str]:
        """Environment as sorted NAME=value strings."""
        return [f"{k}={v}" for k, v in sorted(self._env.items())]
