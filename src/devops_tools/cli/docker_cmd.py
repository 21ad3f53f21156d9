"""`devops-tools docker` subcommands: build, check."""

import sys

from devops_tools.cli.parse_common import split_common
from devops_tools.config import ConfigError, validate_mode
from devops_tools.docker.build_image import run as run_build_image
from devops_tools.docker.check import run as run_check

BUILD_USAGE = (
    "Usage: devops-tools docker build <ubuntu|alpine> [tag] [--mode strict|resilient] "
    "[--platform P] [--latest] [--push] [--dry-run] [--skip-verify]"
)


def run_docker_argv(argv: list[str] | None = None) -> None:
    """Parse docker subcommand from argv and run. argv defaults to sys.argv[2:] when called from main."""
    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    if not argv:
        print("devops-tools docker: missing subcommand (build, check)", file=sys.stderr)
        sys.exit(1)
    cmd = argv[0]
    project_root, config, rest = split_common(argv[1:])

    if cmd == "build":
        variant = "ubuntu"
        tag = "local"
        platform = None
        push = latest = dry_run = False
        verify = True
        positional: list[str] = []
        i = 0
        while i < len(rest):
            if rest[i] == "--mode" and i + 1 < len(rest):
                try:
                    config = {**config, "mode": validate_mode(rest[i + 1])}
                except ConfigError as e:
                    print(f"❌ {e}", file=sys.stderr)
                    sys.exit(1)
                i += 2
            elif rest[i] == "--platform" and i + 1 < len(rest):
                platform = rest[i + 1]
                i += 2
            elif rest[i] == "--push":
                push = True
                i += 1
            elif rest[i] == "--latest":
                latest = True
                i += 1
            elif rest[i] == "--dry-run":
                dry_run = True
                i += 1
            elif rest[i] == "--skip-verify":
                verify = False
                i += 1
            elif rest[i].startswith("-"):
                print(f"Unknown option: {rest[i]}", file=sys.stderr)
                print(BUILD_USAGE, file=sys.stderr)
                sys.exit(1)
            else:
                positional.append(rest[i])
                i += 1
        if len(positional) > 2:
            print(BUILD_USAGE, file=sys.stderr)
            sys.exit(1)
        if positional:
            variant = positional[0]
        if len(positional) > 1:
            tag = positional[1]
        rc = run_build_image(
            variant,
            tag,
            project_root=project_root,
            config=config,
            platform=platform,
            push=push,
            latest=latest,
            dry_run=dry_run,
            verify=verify,
        )
        sys.exit(rc)

    if cmd == "check":
        variants = []
        i = 0
        while i < len(rest):
            if rest[i] == "--variant" and i + 1 < len(rest):
                variants.append(rest[i + 1])
                i += 2
            else:
                i += 1
        rc = run_check(project_root, variants or None)
        sys.exit(rc)

    print(f"Unknown docker subcommand: {cmd}", file=sys.stderr)
    sys.exit(1)
