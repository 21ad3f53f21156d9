"""Shared helpers for devops_tools (image naming, build metadata).

Used by the docker build driver and the CLI.
"""

from __future__ import annotations

import subprocess
from datetime import datetime, timezone
from pathlib import Path

# --- Naming ---


def image_tag(registry: str, image_name: str, tag: str, variant: str) -> str:
    """Full image reference: {registry}/{image_name}:{tag}-{variant}."""
    registry = registry.rstrip("/")
    repo = f"{registry}/{image_name}" if registry else image_name
    return f"{repo}:{tag}-{variant}"


def latest_tag(registry: str, image_name: str, variant: str) -> str:
    return image_tag(registry, image_name, "latest", variant)


# --- Build metadata ---


def build_date(now: datetime | None = None) -> str:
    """UTC timestamp for the org.opencontainers.image.created label (2024-01-31T12:00:00Z)."""
    ts = now or datetime.now(timezone.utc)
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def vcs_ref(project_root: Path) -> str:
    """Short git SHA of HEAD, or 'unknown' outside a git checkout."""
    try:
        r = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=str(project_root),
            capture_output=True,
            text=True,
        )
    except FileNotFoundError:
        return "unknown"
    if r.returncode != 0 or not r.stdout.strip():
        return "unknown"
    return r.stdout.strip()
