"""Image variants: which Dockerfile and runtime target each base OS uses."""

from __future__ import annotations

VARIANTS: dict[str, dict[str, str]] = {
    "ubuntu": {"dockerfile": "Dockerfile", "target": "runtime"},
    "alpine": {"dockerfile": "Dockerfile.alpine", "target": "alpine-runtime"},
}


def get_variant(variant: str) -> dict[str, str]:
    """Dockerfile and target for variant. Raises ValueError for anything but ubuntu/alpine."""
    try:
        return VARIANTS[variant]
    except KeyError:
        msg = f"Invalid variant: {variant}. Use 'ubuntu' or 'alpine'"
        raise ValueError(msg) from None
