"""`devops-tools resolve|urls|fetch|verify`: run inside the builder stage or on a workstation."""

import argparse
import sys
from pathlib import Path

from devops_tools.arch.resolve import UnsupportedPlatformError, resolve_platform, tool_arch
from devops_tools.cli.parse_common import split_common
from devops_tools.config import MODES
from devops_tools.tools.catalog import VARIANT_NAMES, resolve_urls, tools_for_variant
from devops_tools.tools.fetch import run as run_fetch
from devops_tools.tools.verify import run as run_verify


def _resolve_or_exit(platform: str | None) -> str:
    try:
        return resolve_platform(platform)
    except UnsupportedPlatformError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)


def _parser(prog: str, description: str) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog=f"devops-tools {prog}", description=description)
    ap.add_argument(
        "--variant",
        choices=VARIANT_NAMES,
        default="ubuntu",
        help="Image variant whose tool set to use (default: ubuntu)",
    )
    return ap


def run_resolve_argv(argv: list[str] | None = None) -> None:
    """Print the normalized arch and each tool's arch name for --platform (default: host)."""
    if argv is None:
        argv = sys.argv[2:]
    _root, config, rest = split_common(argv)
    ap = _parser("resolve", "Resolve a build platform to architecture tags")
    ap.add_argument("--platform", default=None, help="linux/amd64 or linux/arm64 (default: host)")
    args = ap.parse_args(rest)
    arch = _resolve_or_exit(args.platform)
    print(arch)
    for tool in tools_for_variant(args.variant, config["versions"]):
        if tool.downloadable:
            print(f"{tool.name}\t{tool_arch(arch, tool.arch_map)}")
    sys.exit(0)


def run_urls_argv(argv: list[str] | None = None) -> None:
    """Print name<TAB>url for every downloadable tool."""
    if argv is None:
        argv = sys.argv[2:]
    _root, config, rest = split_common(argv)
    ap = _parser("urls", "Print resolved download URLs")
    ap.add_argument("--platform", default=None, help="linux/amd64 or linux/arm64 (default: host)")
    args = ap.parse_args(rest)
    arch = _resolve_or_exit(args.platform)
    for name, url in resolve_urls(tools_for_variant(args.variant, config["versions"]), arch).items():
        print(f"{name}\t{url}")
    sys.exit(0)


def run_fetch_argv(argv: list[str] | None = None) -> None:
    """Download and install tools for --platform into --dest."""
    if argv is None:
        argv = sys.argv[2:]
    _root, config, rest = split_common(argv)
    ap = _parser("fetch", "Download tool binaries into an install directory")
    ap.add_argument("--platform", default=None, help="linux/amd64 or linux/arm64 (default: host)")
    ap.add_argument("--mode", choices=MODES, default=None, help="strict or resilient")
    ap.add_argument("--jobs", type=int, default=None, help="Parallel downloads")
    ap.add_argument("--dest", type=Path, default=None, help="Install directory")
    args = ap.parse_args(rest)
    arch = _resolve_or_exit(args.platform)
    mode = args.mode or config["mode"]
    jobs = args.jobs if args.jobs is not None else config["jobs"]
    if jobs < 1:
        print("❌ --jobs must be >= 1", file=sys.stderr)
        sys.exit(1)
    dest = args.dest or Path(config["install_dir"])
    tools = tools_for_variant(args.variant, config["versions"])
    print(f"🔧 Fetching tools for {arch} into {dest} ({mode}, jobs={jobs})")
    rc = run_fetch(tools, arch, dest, mode=mode, jobs=jobs)
    sys.exit(rc)


def run_verify_argv(argv: list[str] | None = None) -> None:
    """Run version checks locally or inside --image."""
    if argv is None:
        argv = sys.argv[2:]
    _root, config, rest = split_common(argv)
    ap = _parser("verify", "Check that each installed tool responds")
    ap.add_argument("--mode", choices=MODES, default=None, help="strict or resilient")
    ap.add_argument("--image", default=None, help="Run checks inside this image via docker run")
    ap.add_argument(
        "--downloaded-only",
        action="store_true",
        help="Skip OS-package and pip tools (builder stage)",
    )
    args = ap.parse_args(rest)
    mode = args.mode or config["mode"]
    tools = tools_for_variant(args.variant, config["versions"])
    if args.downloaded_only:
        tools = [t for t in tools if t.downloadable]
    prefix = ["docker", "run", "--rm", args.image] if args.image else []
    rc = run_verify(tools, mode=mode, exec_prefix=prefix)
    sys.exit(rc)
