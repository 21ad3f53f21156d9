"""Pytest fixtures for devops_tools tests."""

from __future__ import annotations

import io
import tarfile
import zipfile
from pathlib import Path
from urllib.error import HTTPError

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]


def make_zip(members: dict[str, bytes], modes: dict[str, int] | None = None) -> bytes:
    """In-memory zip; modes sets unix permission bits per member."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in members.items():
            info = zipfile.ZipInfo(name)
            mode = (modes or {}).get(name)
            if mode is not None:
                info.external_attr = mode << 16
            zf.writestr(info, data)
    return buf.getvalue()


def make_tgz(members: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


class BrokenBody(io.BytesIO):
    """Response body whose reads raise exc, e.g. a truncated transfer."""

    def __init__(self, exc: BaseException) -> None:
        super().__init__()
        self.exc = exc

    def read(self, *args):
        raise self.exc

    def readinto(self, *args):
        raise self.exc


class FakeUrlopen:
    """Serves payloads by URL; unknown URLs raise HTTP 404. Records requested URLs.

    An exception payload is raised while the body is read.
    """

    def __init__(self, payloads: dict[str, bytes | BaseException]) -> None:
        self.payloads = payloads
        self.requested: list[str] = []

    def __call__(self, req, timeout=None):
        url = req.full_url
        self.requested.append(url)
        if url not in self.payloads:
            raise HTTPError(url, 404, "Not Found", {}, None)
        payload = self.payloads[url]
        if isinstance(payload, BaseException):
            return BrokenBody(payload)
        return io.BytesIO(payload)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Project tree with config and both Dockerfiles (contents irrelevant to the driver)."""
    (tmp_path / "Dockerfile").write_text("FROM ubuntu:22.04 AS runtime\n")
    (tmp_path / "Dockerfile.alpine").write_text("FROM alpine:3.18 AS alpine-runtime\n")
    (tmp_path / "devops-tools.yaml").write_text(
        "registry: registry.example.com/team\nimage_name: toolbox\n"
    )
    return tmp_path


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop config-overriding environment variables the host might set."""
    for var in (
        "REGISTRY",
        "IMAGE_NAME",
        "FAIL_MODE",
        "FETCH_JOBS",
        "INSTALL_DIR",
        "TERRAFORM_VERSION",
        "KUBECTL_VERSION",
        "HELM_VERSION",
        "AWSCLI_VERSION",
        "DOCKER_VERSION",
        "YQ_VERSION",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def repo_root() -> Path:
    return REPO_ROOT


@pytest.fixture(name="make_zip")
def make_zip_fixture():
    return make_zip


@pytest.fixture(name="make_tgz")
def make_tgz_fixture():
    return make_tgz


@pytest.fixture
def serve(monkeypatch: pytest.MonkeyPatch):
    """serve({url: bytes}) patches urlopen in the fetcher and returns the FakeUrlopen."""

    def _serve(payloads: dict[str, bytes | BaseException]) -> FakeUrlopen:
        fake = FakeUrlopen(payloads)
        monkeypatch.setattr("devops_tools.tools.fetch.urlopen", fake)
        return fake

    return _serve
