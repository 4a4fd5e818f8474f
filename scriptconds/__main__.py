"""CLI entry point for scriptconds."""

import argparse
import json
import logging
import os
import sys

from . import (
    ExitCode,
    GuardEvaluator,
    HostConfig,
    ScriptCondError,
    ScriptState,
    __version__,
    register_all,
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="scriptconds",
        description="scriptconds - Condition evaluation for test scripts",
    )
    parser.add_argument("--version", action="version", version=f"scriptconds {__version__}")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log condition evaluation"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("version", help="Show version")

    list_parser = subparsers.add_parser("list", help="List registered conditions")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    check_parser = subparsers.add_parser(
        "check", help="Evaluate the condition guards of a script line"
    )
    check_parser.add_argument("line", help="Script line, e.g. '[!cgo] [GOOS:linux] go build'")
    check_parser.add_argument(
        "--env",
        "-e",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Set a script environment variable (repeatable)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[scriptconds] %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "version":
            return cmd_version()
        elif args.command == "list":
            return cmd_list(args)
        elif args.command == "check":
            return cmd_check(args)
    except ScriptCondError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        return ExitCode.RUNTIME_ERROR

    return 0


def cmd_version() -> int:
    """Show version."""
    print(f"scriptconds {__version__}")
    return 0


def cmd_list(args) -> int:
    """List registered conditions with their summaries."""
    registry = register_all()
    entries = registry.usage()

    if args.json:
        output = [
            {"name": name, "summary": usage.summary, "prefix": usage.prefix}
            for name, usage in entries
        ]
        print(json.dumps(output, indent=2))
        return 0

    width = max((len(name) for name, _ in entries), default=0)
    for name, usage in entries:
        print(f"[{name}]".ljust(width + 3) + usage.summary)
    return 0


def cmd_check(args) -> int:
    """Evaluate the guards on a script line against the current environment."""
    config = HostConfig.from_environ()
    environ = dict(os.environ)
    for item in args.env:
        name, sep, value = item.partition("=")
        if not sep or not name:
            print(f"Error: --env expects NAME=VALUE, got {item!r}", file=sys.stderr)
            return ExitCode.VALIDATION_ERROR
        environ[name] = value

    state = ScriptState.for_host(config, environ)
    evaluator = GuardEvaluator(register_all(config))
    decision = evaluator.evaluate_line(state, args.line)

    if decision.run:
        print(f"run: {decision.command}")
    else:
        print(f"skip: {decision.command}")
        print(f"  {decision.blocked_by} not satisfied ({decision.summary})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
