"""Tool catalog, fetcher and verifier."""

from .catalog import (
    DEFAULT_TOOLS,
    DEFAULT_VERSIONS,
    ToolDescriptor,
    resolve_url,
    resolve_urls,
    tools_for_variant,
)
from .fetch import FetchError, FetchReport, fetch_all, fetch_tool
from .verify import VerifyReport, format_report, verify_tools

__all__ = [
    "DEFAULT_TOOLS",
    "DEFAULT_VERSIONS",
    "FetchError",
    "FetchReport",
    "ToolDescriptor",
    "VerifyReport",
    "fetch_all",
    "fetch_tool",
    "format_report",
    "resolve_url",
    "resolve_urls",
    "tools_for_variant",
    "verify_tools",
]
