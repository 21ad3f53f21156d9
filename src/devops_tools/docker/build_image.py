"""Build a variant image, verify the tools inside it, optionally tag latest and push."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Any

from devops_tools.arch.resolve import UnsupportedPlatformError, resolve_platform
from devops_tools.config import DEFAULT_CONFIG
from devops_tools.docker.variants import get_variant
from devops_tools.helpers import build_date, image_tag, latest_tag, vcs_ref
from devops_tools.tools.catalog import ToolDescriptor, tools_for_variant
from devops_tools.tools.verify import format_report, verify_tools


def build_args(
    tools: list[ToolDescriptor],
    tag: str,
    mode: str,
    project_root: Path,
    created: str | None = None,
) -> list[str]:
    """--build-arg pairs: BUILD_DATE, VCS_REF, VERSION, FAIL_MODE and <TOOL>_VERSION per pinned tool."""
    values = {
        "BUILD_DATE": created or build_date(),
        "VCS_REF": vcs_ref(project_root),
        "VERSION": tag,
        "FAIL_MODE": mode,
    }
    for t in tools:
        if t.version:
            values[t.env_var] = t.version
    return [x for k, v in values.items() for x in ("--build-arg", f"{k}={v}")]


def build_command(
    dockerfile: Path,
    target: str,
    tags: list[str],
    args: list[str],
    project_root: Path,
    platforms: list[str] | None = None,
    push: bool = False,
) -> list[str]:
    """docker build for the host platform; docker buildx build when platforms are given."""
    if platforms:
        return [
            "docker",
            "buildx",
            "build",
            "--platform",
            ",".join(platforms),
            "--file",
            str(dockerfile),
            "--target",
            target,
            *[x for t in tags for x in ("--tag", t)],
            *args,
            "--push" if push else "--load",
            str(project_root),
        ]
    return [
        "docker",
        "build",
        "--file",
        str(dockerfile),
        "--target",
        target,
        *[x for t in tags for x in ("--tag", t)],
        *args,
        str(project_root),
    ]


def _image_size(full_tag: str, root: Path) -> str | None:
    r = subprocess.run(
        ["docker", "images", "--format", "{{.Size}}", full_tag],
        capture_output=True,
        text=True,
        cwd=str(root),
    )
    if r.returncode != 0 or not r.stdout.strip():
        return None
    return r.stdout.strip().splitlines()[0]


def run(
    variant: str,
    tag: str = "local",
    project_root: Path | None = None,
    config: dict[str, Any] | None = None,
    platform: str | None = None,
    push: bool = False,
    latest: bool = False,
    dry_run: bool = False,
    verify: bool = True,
) -> int:
    """Build {registry}/{image_name}:{tag}-{variant}, verify it, report size. Returns 0 or 1."""
    root = Path(project_root) if project_root is not None else Path.cwd()
    cfg = config or DEFAULT_CONFIG
    try:
        vcfg = get_variant(variant)
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    platforms: list[str] = []
    if platform:
        platforms = [p.strip() for p in platform.split(",") if p.strip()]
        try:
            for p in platforms:
                resolve_platform(p)
        except UnsupportedPlatformError as e:
            print(f"❌ {e}", file=sys.stderr)
            return 1
        if len(platforms) > 1 and not push:
            print("❌ Multi-platform builds cannot be loaded locally; use --push", file=sys.stderr)
            return 1

    dockerfile = root / vcfg["dockerfile"]
    if not dockerfile.exists():
        print(f"❌ {dockerfile} not found", file=sys.stderr)
        return 1

    mode = cfg["mode"]
    tools = tools_for_variant(variant, cfg.get("versions"))
    full_tag = image_tag(cfg["registry"], cfg["image_name"], tag, variant)
    latest_ref = latest_tag(cfg["registry"], cfg["image_name"], variant) if latest else None
    # A multi-platform push never lands in the local image store.
    in_local_store = not (platforms and push)
    tags = [full_tag]
    if latest_ref and not in_local_store:
        tags.append(latest_ref)
    args = build_args(tools, tag, mode, root)
    cmd = build_command(dockerfile, vcfg["target"], tags, args, root, platforms, push)

    print("🏗️  Building DevOps Tools Container")
    print(f"   Variant: {variant}")
    print(f"   Tag: {full_tag}")
    print(f"   Dockerfile: {vcfg['dockerfile']}")
    print(f"   Mode: {mode}")

    if dry_run:
        print(f"[dry-run] would: {' '.join(cmd)}")
        if verify:
            print(f"[dry-run] would: docker run --rm {full_tag} <verify {len(tools)} tools>")
        return 0

    r = subprocess.run(cmd, cwd=str(root))
    if r.returncode != 0:
        print("❌ Docker build failed", file=sys.stderr)
        return 1
    print(f"✅ Image built successfully: {full_tag}")

    if verify and in_local_store:
        print("🧪 Testing image functionality...")
        report = verify_tools(tools, mode=mode, exec_prefix=["docker", "run", "--rm", full_tag])
        for line in format_report(report):
            print(line, file=sys.stderr if line.startswith("❌") else sys.stdout)
        if not report.ok and mode == "strict":
            return 1

    if in_local_store:
        size = _image_size(full_tag, root)
        if size:
            print(f"✅ Final image size: {size}")

    if latest_ref and in_local_store:
        t = subprocess.run(["docker", "tag", full_tag, latest_ref], cwd=str(root))
        if t.returncode != 0:
            print(f"❌ Could not tag {latest_ref}", file=sys.stderr)
            return 1
        print(f"✅ Tagged as: {latest_ref}")
        tags.append(latest_ref)

    if push and not platforms:
        for ref in tags:
            p = subprocess.run(["docker", "push", ref], cwd=str(root))
            if p.returncode != 0:
                print(f"❌ Push failed: {ref}", file=sys.stderr)
                return 1
            print(f"✅ Pushed: {ref}")

    print("🎉 Build completed successfully!")
    print(f"   Run with: docker run -it --rm {full_tag}")
    return 0
