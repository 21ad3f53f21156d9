"""Docker helpers: image variants, build-and-verify driver, Dockerfile checks."""

from .build_image import run as run_build_image
from .check import run as run_check
from .variants import VARIANTS, get_variant

__all__ = [
    "VARIANTS",
    "get_variant",
    "run_build_image",
    "run_check",
]
