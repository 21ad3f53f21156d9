"""Main CLI entry point for devops-tools."""

import logging
import os
import sys

from devops_tools.cli import docker_cmd, tools_cmd


def _configure_logging() -> None:
    level = os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """Main CLI entry point."""
    _configure_logging()
    if len(sys.argv) < 2:
        print("Usage: devops-tools <command> [args...]", file=sys.stderr)
        print("Commands:", file=sys.stderr)
        print("  resolve [--platform P]   - Architecture tag and per-tool arch names", file=sys.stderr)
        print("  urls [--platform P]      - Resolved download URLs", file=sys.stderr)
        print(
            "  fetch [--platform P] [--mode M] [--jobs N] [--dest DIR] - Download tools",
            file=sys.stderr,
        )
        print(
            "  verify [--mode M] [--image TAG] [--downloaded-only] - Run version checks",
            file=sys.stderr,
        )
        print(
            "  docker <cmd> ...         - build <variant> [tag], check",
            file=sys.stderr,
        )
        print("All commands accept --config <path> and --variant ubuntu|alpine.", file=sys.stderr)
        sys.exit(1)

    command = sys.argv[1]

    if command == "resolve":
        tools_cmd.run_resolve_argv()
    elif command == "urls":
        tools_cmd.run_urls_argv()
    elif command == "fetch":
        tools_cmd.run_fetch_argv()
    elif command == "verify":
        tools_cmd.run_verify_argv()
    elif command == "docker":
        docker_cmd.run_docker_argv()
    else:
        print(f"Error: Unknown command: {command}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
