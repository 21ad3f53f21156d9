"""Shared CLI argument parsing for common flags (--config, --project-root)."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from devops_tools.config import ConfigError, load_config


def parse_flags(
    argv: list[str],
    *specs: tuple[str, str, Any, Callable[[str], Any] | None],
) -> tuple[dict[str, Any], list[str]]:
    """Parse optional --flag value from argv in one pass.

    Each spec is (key, flag_str, default, converter).
    E.g. ("project_root", "--project-root", Path.cwd, lambda s: Path(s).resolve()).
    converter can be None for string values.
    Returns (dict of key -> value, remaining argv).
    """
    result: dict[str, Any] = {}
    for key, _flag, default, _converter in specs:
        result[key] = default() if callable(default) else default

    rest: list[str] = []
    i = 0
    while i < len(argv):
        matched = False
        for key, flag_str, _default, converter in specs:
            if argv[i] == flag_str and i + 1 < len(argv):
                result[key] = converter(argv[i + 1]) if converter else argv[i + 1]
                i += 2
                matched = True
                break
        if not matched:
            rest.append(argv[i])
            i += 1
    return result, rest


def path_resolver(s: str) -> Path:
    """Resolve a path argument to absolute Path (e.g. --project-root, --config)."""
    return Path(s).resolve()


def split_common(argv: list[str]) -> tuple[Path, dict[str, Any], list[str]]:
    """Pull --project-root and --config out of argv and load config. Exits 1 on a config error."""
    parsed, rest = parse_flags(
        argv,
        ("project_root", "--project-root", Path.cwd, path_resolver),
        ("config_path", "--config", None, path_resolver),
    )
    try:
        config = load_config(parsed["project_root"], parsed["config_path"])
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
    return parsed["project_root"], config, rest
