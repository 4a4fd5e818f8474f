"""Platform capability tables.

Answers which GOOS/GOARCH combinations support a given toolchain feature.
The tables mirror the ports known to the Go distribution.
"""

KNOWN_OS = frozenset({
    "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos",
    "ios", "js", "linux", "nacl", "netbsd", "openbsd", "plan9", "solaris",
    "wasip1", "windows", "zos",
})

KNOWN_ARCH = frozenset({
    "386", "amd64", "amd64p32", "arm", "armbe", "arm64", "arm64be", "loong64",
    "mips", "mipsle", "mips64", "mips64le", "mips64p32", "mips64p32le", "ppc",
    "ppc64", "ppc64le", "riscv", "riscv64", "s390", "s390x", "sparc",
    "sparc64", "wasm",
})

KNOWN_COMPILERS = frozenset({"gc", "gccgo"})

# Ports listed by `go tool dist list`.
DIST_PORTS = frozenset({
    "aix/ppc64",
    "android/386", "android/amd64", "android/arm", "android/arm64",
    "darwin/amd64", "darwin/arm64",
    "dragonfly/amd64",
    "freebsd/386", "freebsd/amd64", "freebsd/arm", "freebsd/arm64", "freebsd/riscv64",
    "illumos/amd64",
    "ios/amd64", "ios/arm64",
    "js/wasm",
    "linux/386", "linux/amd64", "linux/arm", "linux/arm64", "linux/loong64",
    "linux/mips", "linux/mips64", "linux/mips64le", "linux/mipsle",
    "linux/ppc64", "linux/ppc64le", "linux/riscv64", "linux/s390x",
    "netbsd/386", "netbsd/amd64", "netbsd/arm", "netbsd/arm64",
    "openbsd/386", "openbsd/amd64", "openbsd/arm", "openbsd/arm64",
    "openbsd/ppc64", "openbsd/riscv64",
    "plan9/386", "plan9/amd64", "plan9/arm",
    "solaris/amd64",
    "wasip1/wasm",
    "windows/386", "windows/amd64", "windows/arm", "windows/arm64",
})

_C_SHARED_PORTS = frozenset({
    "linux/amd64", "linux/arm", "linux/arm64", "linux/loong64", "linux/386",
    "linux/ppc64le", "linux/riscv64", "linux/s390x",
    "android/amd64", "android/arm", "android/arm64", "android/386",
    "freebsd/amd64",
    "darwin/amd64", "darwin/arm64",
    "windows/amd64", "windows/386", "windows/arm64",
    "wasip1/wasm",
})

_PIE_PORTS = frozenset({
    "linux/386", "linux/amd64", "linux/arm", "linux/arm64", "linux/loong64",
    "linux/ppc64le", "linux/riscv64", "linux/s390x",
    "android/amd64", "android/arm", "android/arm64", "android/386",
    "freebsd/amd64",
    "darwin/amd64", "darwin/arm64",
    "ios/amd64", "ios/arm64",
    "aix/ppc64",
    "openbsd/arm64",
    "windows/386", "windows/amd64", "windows/arm", "windows/arm64",
})

_SHARED_PORTS = frozenset({
    "linux/386", "linux/amd64", "linux/arm", "linux/arm64", "linux/ppc64le", "linux/s390x",
})

_PLUGIN_PORTS = frozenset({
    "linux/amd64", "linux/arm", "linux/arm64", "linux/386", "linux/loong64",
    "linux/s390x", "linux/ppc64le",
    "android/amd64", "android/386",
    "darwin/amd64", "darwin/arm64",
    "freebsd/amd64",
})


def race_detector_supported(goos: str, goarch: str) -> bool:
    """Whether -race is supported on goos/goarch."""
    match goos:
        case "linux":
            return goarch in ("amd64", "ppc64le", "arm64", "s390x", "loong64")
        case "darwin":
            return goarch in ("amd64", "arm64")
        case "freebsd" | "netbsd" | "windows":
            return goarch == "amd64"
    return False


def msan_supported(goos: str, goarch: str) -> bool:
    """Whether -msan is supported on goos/goarch."""
    match goos:
        case "linux":
            return goarch in ("amd64", "arm64", "loong64")
        case "freebsd":
            return goarch == "amd64"
    return False


def asan_supported(goos: str, goarch: str) -> bool:
    """Whether -asan is supported on goos/goarch."""
    if goos == "linux":
        return goarch in ("arm64", "amd64", "loong64", "riscv64", "ppc64le")
    return False


def fuzz_supported(goos: str, goarch: str) -> bool:
    """Whether -fuzz is supported on goos/goarch."""
    return goos in ("darwin", "freebsd", "linux", "windows")


def fuzz_instrumented(goos: str, goarch: str) -> bool:
    """Whether -fuzz builds get coverage instrumentation on goos/goarch."""
    if goarch in ("amd64", "arm64"):
        return fuzz_supported(goos, goarch)
    return False


def build_mode_supported(compiler: str, buildmode: str, goos: str, goarch: str) -> bool:
    """Whether -buildmode=buildmode is supported for compiler on goos/goarch."""
    if compiler == "gccgo":
        return True

    port = f"{goos}/{goarch}"
    if port not in DIST_PORTS:
        return False

    match buildmode:
        case "archive" | "default" | "exe":
            return True
        case "c-archive":
            match goos:
                case "aix" | "darwin" | "ios" | "windows":
                    return True
                case "linux":
                    return goarch in (
                        "386", "amd64", "arm", "armbe", "arm64", "arm64be",
                        "loong64", "ppc64le", "riscv64", "s390x",
                    )
                case "freebsd":
                    return goarch == "amd64"
            return False
        case "c-shared":
            return port in _C_SHARED_PORTS
        case "pie":
            return port in _PIE_PORTS
        case "shared":
            return port in _SHARED_PORTS
        case "plugin":
            return port in _PLUGIN_PORTS
    return False


def default_cc(goos: str, goarch: str) -> str:
    """Default C compiler the go command uses for goos/goarch."""
    if goos in ("darwin", "ios", "freebsd", "openbsd"):
        return "clang"
    return "gcc"
