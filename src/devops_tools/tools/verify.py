"""Run each tool's version command and report which ones respond.

Diagnostic only: nothing is installed or modified. exec_prefix lets the same
checks run inside a built image, e.g. ("docker", "run", "--rm", "<tag>").
"""

from __future__ import annotations

import logging
import subprocess
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field

from devops_tools.tools.catalog import ToolDescriptor

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


@dataclass
class VerifyReport:
    mode: str = "strict"
    passed: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def check_tool(
    tool: ToolDescriptor,
    exec_prefix: Sequence[str] = (),
    runner=None,
    timeout: int | None = DEFAULT_TIMEOUT,
) -> str | None:
    """Run tool.verify. Returns None on success, else a failure reason."""
    cmd = [*exec_prefix, *tool.verify]
    run_cmd = runner or subprocess.run
    try:
        r = run_cmd(cmd, capture_output=True, text=True, errors="replace", timeout=timeout)
    except FileNotFoundError:
        return f"{cmd[0]} not found"
    except subprocess.TimeoutExpired:
        return f"timed out after {timeout}s"
    except OSError as e:
        return f"{cmd[0]}: {e.strerror or e}"
    output = f"{r.stdout or ''}{r.stderr or ''}"
    if r.returncode != 0:
        first = output.strip().splitlines()[0] if output.strip() else ""
        return f"exit {r.returncode}" + (f": {first}" if first else "")
    if tool.expect_version and tool.version and tool.version not in output:
        return f"expected version {tool.version} not in output"
    return None


def verify_tools(
    tools: list[ToolDescriptor],
    mode: str = "strict",
    exec_prefix: Sequence[str] = (),
    runner=None,
    timeout: int | None = DEFAULT_TIMEOUT,
) -> VerifyReport:
    """Check every tool. strict stops at the first failure; resilient checks all and logs failures."""
    report = VerifyReport(mode=mode)
    for tool in tools:
        reason = check_tool(tool, exec_prefix=exec_prefix, runner=runner, timeout=timeout)
        if reason is None:
            report.passed.append(tool.name)
            continue
        report.failed[tool.name] = reason
        if mode == "strict":
            break
        log.warning("Verification failed for %s: %s", tool.name, reason)
    return report


def format_report(report: VerifyReport) -> list[str]:
    lines = [f"✅ {name}" for name in report.passed]
    lines.extend(f"❌ {name}: {reason}" for name, reason in report.failed.items())
    if report.ok:
        lines.append(f"🎉 All {len(report.passed)} tools working!")
    else:
        lines.append(f"Failed tools: {', '.join(report.failed)}")
    return lines


def run(
    tools: list[ToolDescriptor],
    mode: str = "strict",
    exec_prefix: Sequence[str] = (),
) -> int:
    """CLI entry: verify and print the report. Non-zero only for strict-mode failures."""
    print("🧪 Testing tools...")
    report = verify_tools(tools, mode=mode, exec_prefix=exec_prefix)
    for line in format_report(report):
        print(line, file=sys.stderr if line.startswith("❌") else sys.stdout)
    if report.ok or mode == "resilient":
        return 0
    return 1
