"""Resolve a build platform (linux/amd64, linux/arm64) to an architecture tag and per-tool arch names."""

from __future__ import annotations

import platform as _platform

ARCH_PLATFORMS: dict[str, str] = {
    "amd64": "linux/amd64",
    "arm64": "linux/arm64",
}

SUPPORTED_PLATFORMS: dict[str, str] = {p: arch for arch, p in ARCH_PLATFORMS.items()}

# uname -m -> normalized tag, used only when no platform was passed in.
HOST_MACHINES: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

# AWS CLI and Docker static releases name architectures the uname way.
UNAME_ARCH_MAP: dict[str, str] = {"amd64": "x86_64", "arm64": "aarch64"}


class UnsupportedPlatformError(ValueError):
    """Platform or architecture outside the supported set."""


def detect_host_architecture(machine: str | None = None) -> str:
    """Normalized tag for the host machine (platform.machine()). Raises UnsupportedPlatformError."""
    m = (machine if machine is not None else _platform.machine()).lower()
    arch = HOST_MACHINES.get(m)
    if arch is None:
        msg = f"Unsupported host machine: {m!r}. Supported: {', '.join(sorted(HOST_MACHINES))}"
        raise UnsupportedPlatformError(msg)
    return arch


def resolve_platform(platform: str | None) -> str:
    """Map linux/amd64 -> amd64, linux/arm64 -> arm64.

    Empty or None means no TARGETPLATFORM was provided (classic docker build);
    the host architecture is used instead. Anything else raises.
    """
    if platform is None or not platform.strip():
        return detect_host_architecture()
    arch = SUPPORTED_PLATFORMS.get(platform.strip())
    if arch is None:
        msg = (
            f"Unsupported platform: {platform!r}. "
            f"Use one of: {', '.join(sorted(SUPPORTED_PLATFORMS))}"
        )
        raise UnsupportedPlatformError(msg)
    return arch


def tool_arch(arch: str, arch_map: dict[str, str] | None = None) -> str:
    """Tool-specific arch name for a normalized tag. No arch_map means the tool uses amd64/arm64."""
    if arch not in ARCH_PLATFORMS:
        msg = f"Unknown architecture: {arch!r}. Use amd64 or arm64."
        raise UnsupportedPlatformError(msg)
    if not arch_map:
        return arch
    try:
        return arch_map[arch]
    except KeyError:
        msg = f"No {arch} entry in architecture map {arch_map}"
        raise UnsupportedPlatformError(msg) from None
