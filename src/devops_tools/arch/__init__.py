"""Platform and architecture resolution for image builds."""

from .resolve import (
    ARCH_PLATFORMS,
    SUPPORTED_PLATFORMS,
    UNAME_ARCH_MAP,
    UnsupportedPlatformError,
    detect_host_architecture,
    resolve_platform,
    tool_arch,
)

__all__ = [
    "ARCH_PLATFORMS",
    "SUPPORTED_PLATFORMS",
    "UNAME_ARCH_MAP",
    "UnsupportedPlatformError",
    "detect_host_architecture",
    "resolve_platform",
    "tool_arch",
]
