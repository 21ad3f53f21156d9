"""Download, unpack and install tool executables into a shared bin directory.

strict: the first failure raises FetchError and pending downloads are cancelled.
resilient: failures are logged and collected in the FetchReport; other tools still install.
"""

from __future__ import annotations

import concurrent.futures
import logging
import shutil
import subprocess
import sys
import tarfile
import tempfile
import zipfile
from dataclasses import dataclass, field
from http.client import HTTPException
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from devops_tools.tools.catalog import ToolDescriptor, resolve_member, resolve_url

log = logging.getLogger(__name__)

USER_AGENT = "devops-tools-fetch"


class FetchError(RuntimeError):
    """A tool could not be downloaded or installed."""

    def __init__(self, tool: str, reason: str) -> None:
        super().__init__(f"{tool}: {reason}")
        self.tool = tool
        self.reason = reason


@dataclass
class FetchReport:
    installed: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    urls: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def download(url: str, dest: Path, timeout: int = 60) -> Path:
    """Stream url to dest. urllib errors propagate."""
    req = Request(url, headers={"User-Agent": USER_AGENT})
    with urlopen(req, timeout=timeout) as response, dest.open("wb") as f:
        shutil.copyfileobj(response, f)
    return dest


def _read_zip_member(archive: Path, member: str) -> bytes:
    with zipfile.ZipFile(archive) as zh:
        try:
            return zh.read(member)
        except KeyError:
            msg = f"{member} not found in {archive.name}"
            raise FileNotFoundError(msg) from None


def _read_tar_member(archive: Path, member: str) -> bytes:
    with tarfile.open(archive, "r:gz") as th:
        try:
            info = th.getmember(member)
        except KeyError:
            msg = f"{member} not found in {archive.name}"
            raise FileNotFoundError(msg) from None
        fh = th.extractfile(info)
        if fh is None:
            msg = f"{member} in {archive.name} is not a regular file"
            raise FileNotFoundError(msg)
        with fh:
            return fh.read()


def _extract_zip_tree(archive: Path, dest: Path) -> None:
    """Extract whole zip keeping unix permission bits (zipfile drops them)."""
    with zipfile.ZipFile(archive) as zh:
        for info in zh.infolist():
            name = info.filename
            if name.startswith("/") or ".." in Path(name).parts:
                continue
            zh.extract(info, dest)
            mode = (info.external_attr >> 16) & 0o777
            if mode:
                (dest / name).chmod(mode)


def _install_bytes(data: bytes, target: Path) -> Path:
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(f".{target.name}.partial")
    tmp.write_bytes(data)
    tmp.chmod(0o755)
    tmp.replace(target)
    return target


def _run_installer(tool: ToolDescriptor, script: Path, install_dir: Path, runner=None) -> None:
    prefix = install_dir.parent
    args = [a.format(prefix=prefix, bin_dir=install_dir) for a in tool.installer]
    run_cmd = runner or subprocess.run
    r = run_cmd([str(script), *args], cwd=str(script.parent), capture_output=True, text=True)
    if r.returncode != 0:
        detail = (r.stderr or r.stdout or "").strip()
        msg = f"installer exited {r.returncode}" + (f": {detail}" if detail else "")
        raise FetchError(tool.name, msg)


def fetch_tool(
    tool: ToolDescriptor,
    arch: str,
    install_dir: Path,
    timeout: int = 60,
    runner=None,
) -> Path:
    """Fetch one tool into install_dir/<name>. Returns the installed path. Raises FetchError."""
    url = resolve_url(tool, arch)
    member = resolve_member(tool, arch)
    install_dir.mkdir(parents=True, exist_ok=True)
    target = install_dir / tool.name
    with tempfile.TemporaryDirectory(prefix=f"fetch-{tool.name}-") as tmp:
        tmp_dir = Path(tmp)
        archive = tmp_dir / url.rsplit("/", 1)[-1]
        log.debug("Downloading %s from %s", tool.name, url)
        try:
            download(url, archive, timeout=timeout)
        except HTTPError as e:
            raise FetchError(tool.name, f"HTTP {e.code} for {url}") from e
        except (URLError, HTTPException, OSError, ValueError) as e:
            raise FetchError(tool.name, f"download failed for {url}: {e}") from e

        try:
            if tool.installer:
                _extract_zip_tree(archive, tmp_dir / "unpacked")
                _run_installer(tool, tmp_dir / "unpacked" / member, install_dir, runner=runner)
                return install_dir / tool.verify[0]
            if tool.archive == "binary":
                data = archive.read_bytes()
            elif tool.archive == "zip":
                data = _read_zip_member(archive, member or tool.name)
            elif tool.archive == "tar.gz":
                data = _read_tar_member(archive, member or tool.name)
            else:
                raise FetchError(tool.name, f"unsupported archive type {tool.archive!r}")
        except (FileNotFoundError, zipfile.BadZipFile, tarfile.TarError) as e:
            raise FetchError(tool.name, f"unexpected archive layout: {e}") from e
        except OSError as e:
            raise FetchError(tool.name, str(e)) from e
        try:
            return _install_bytes(data, target)
        except OSError as e:
            raise FetchError(tool.name, f"could not install {target}: {e}") from e


def fetch_all(
    tools: list[ToolDescriptor],
    arch: str,
    install_dir: Path,
    mode: str = "strict",
    jobs: int = 1,
    fetch_fn=fetch_tool,
) -> FetchReport:
    """Fetch every downloadable tool. See module docstring for strict/resilient semantics."""
    wanted = [t for t in tools if t.downloadable]
    report = FetchReport(urls={t.name: resolve_url(t, arch) for t in wanted})

    def _record_failure(err: FetchError) -> None:
        if mode == "strict":
            raise err
        log.warning("Skipping %s: %s", err.tool, err.reason)
        report.failed[err.tool] = err.reason

    if jobs <= 1:
        for tool in wanted:
            print(f"⬇️  {tool.name} {tool.version} ({arch})")
            try:
                fetch_fn(tool, arch, install_dir)
            except FetchError as e:
                _record_failure(e)
                continue
            report.installed.append(tool.name)
        return report

    with concurrent.futures.ThreadPoolExecutor(max_workers=jobs) as pool:
        futures = {pool.submit(fetch_fn, t, arch, install_dir): t for t in wanted}
        for future in concurrent.futures.as_completed(futures):
            tool = futures[future]
            try:
                future.result()
            except FetchError as e:
                if mode == "strict":
                    pool.shutdown(wait=True, cancel_futures=True)
                _record_failure(e)
                continue
            print(f"⬇️  {tool.name} {tool.version} ({arch})")
            report.installed.append(tool.name)
    # Keep catalog order regardless of completion order.
    order = {t.name: i for i, t in enumerate(wanted)}
    report.installed.sort(key=order.__getitem__)
    return report


def run(
    tools: list[ToolDescriptor],
    arch: str,
    install_dir: Path,
    mode: str = "strict",
    jobs: int = 1,
) -> int:
    """CLI entry: fetch tools and print a summary. Returns 0 or 1."""
    try:
        report = fetch_all(tools, arch, install_dir, mode=mode, jobs=jobs)
    except FetchError as e:
        print(f"❌ Fetch failed: {e}", file=sys.stderr)
        return 1
    for name in report.installed:
        print(f"✅ {name} -> {install_dir / name}")
    if report.failed:
        print(f"⚠️  {len(report.failed)} tool(s) not installed (resilient mode):")
        for name, reason in report.failed.items():
            print(f"   - {name}: {reason}")
    return 0
