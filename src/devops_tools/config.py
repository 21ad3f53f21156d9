"""Build configuration: defaults < devops-tools.yaml < environment < CLI flags."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from devops_tools.tools.catalog import DEFAULT_VERSIONS

log = logging.getLogger(__name__)

CONFIG_FILENAME = "devops-tools.yaml"

MODES = ("strict", "resilient")

DEFAULT_CONFIG: dict[str, Any] = {
    "registry": "ghcr.io/your-org",
    "image_name": "devops-tools",
    "mode": "strict",
    "jobs": 1,
    "install_dir": "/tools/bin",
    "versions": dict(DEFAULT_VERSIONS),
}

# env var -> config key
ENV_OVERRIDES: dict[str, str] = {
    "REGISTRY": "registry",
    "IMAGE_NAME": "image_name",
    "FAIL_MODE": "mode",
    "FETCH_JOBS": "jobs",
    "INSTALL_DIR": "install_dir",
}


class ConfigError(ValueError):
    """Invalid configuration file or value."""


def validate_mode(mode: str) -> str:
    m = str(mode).strip().lower()
    if m not in MODES:
        msg = f"Invalid mode: {mode!r}. Use 'strict' or 'resilient'"
        raise ConfigError(msg)
    return m


def validate_jobs(jobs: Any) -> int:
    try:
        n = int(jobs)
    except (TypeError, ValueError):
        msg = f"Invalid jobs value: {jobs!r}"
        raise ConfigError(msg) from None
    if n < 1:
        msg = f"jobs must be >= 1, got {n}"
        raise ConfigError(msg)
    return n


def resolve_config(config: dict[str, Any] | None) -> dict[str, Any]:
    """Return config dict with defaults filled. Unknown keys are dropped; versions are merged per tool."""
    out = dict(DEFAULT_CONFIG)
    out["versions"] = dict(DEFAULT_CONFIG["versions"])
    if not config:
        return out
    for k, v in config.items():
        if k == "versions":
            if not isinstance(v, dict):
                msg = f"'versions' must be a mapping, got {type(v).__name__}"
                raise ConfigError(msg)
            out["versions"].update({str(name): str(ver) for name, ver in v.items()})
        elif k in out:
            out[k] = v
        else:
            log.debug("Ignoring unknown config key %s", k)
    out["mode"] = validate_mode(out["mode"])
    out["jobs"] = validate_jobs(out["jobs"])
    return out


def load_config_file(path: Path) -> dict[str, Any]:
    """Load YAML config. Missing file means empty config."""
    if not path.is_file():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        msg = f"Could not parse {path}: {e}"
        raise ConfigError(msg) from e
    if not isinstance(data, dict):
        msg = f"{path}: top level must be a mapping"
        raise ConfigError(msg)
    return data


def apply_env(config: dict[str, Any], environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Overlay REGISTRY, IMAGE_NAME, FAIL_MODE, FETCH_JOBS, INSTALL_DIR and <TOOL>_VERSION."""
    env = os.environ if environ is None else environ
    out = dict(config)
    out["versions"] = dict(config.get("versions") or {})
    for var, key in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            out[key] = value
    for name in list(out["versions"]):
        value = env.get(f"{name.upper()}_VERSION")
        if value:
            out["versions"][name] = value
    out["mode"] = validate_mode(out["mode"])
    out["jobs"] = validate_jobs(out["jobs"])
    return out


def load_config(
    project_root: Path | None = None,
    config_path: Path | None = None,
    environ: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Defaults, then devops-tools.yaml (or config_path), then environment."""
    root = Path(project_root) if project_root is not None else Path.cwd()
    path = config_path or (root / CONFIG_FILENAME)
    if config_path is not None and not path.is_file():
        msg = f"Config file not found: {path}"
        raise ConfigError(msg)
    cfg = resolve_config(load_config_file(path))
    return apply_env(cfg, environ)
