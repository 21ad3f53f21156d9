"""Tests for devops_tools.cli (devops-tools entry point)."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from devops_tools.cli.main import main
from devops_tools.cli.parse_common import parse_flags


def _main(monkeypatch: pytest.MonkeyPatch, *argv: str) -> int:
    monkeypatch.setattr(sys, "argv", ["devops-tools", *argv])
    with pytest.raises(SystemExit) as exc:
        main()
    return exc.value.code


class TestParseFlags:
    def test_extracts_known_flags(self) -> None:
        parsed, rest = parse_flags(
            ["build", "--config", "x.yaml", "ubuntu", "--push"],
            ("config", "--config", None, None),
            ("root", "--project-root", lambda: "cwd", None),
        )
        assert parsed == {"config": "x.yaml", "root": "cwd"}
        assert rest == ["build", "ubuntu", "--push"]


@pytest.mark.usefixtures("clean_env")
class TestMain:
    def test_no_command(self, monkeypatch, capsys) -> None:
        assert _main(monkeypatch) == 1
        assert "Usage: devops-tools" in capsys.readouterr().err

    def test_unknown_command(self, monkeypatch) -> None:
        assert _main(monkeypatch, "deploy") == 1

    def test_resolve_arm64(self, monkeypatch, capsys, project_root: Path) -> None:
        rc = _main(
            monkeypatch, "resolve", "--platform", "linux/arm64", "--project-root", str(project_root)
        )
        assert rc == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "arm64"
        assert "awscli\taarch64" in out
        assert "kubectl\tarm64" in out

    def test_resolve_unsupported_platform(self, monkeypatch, capsys, project_root: Path) -> None:
        rc = _main(
            monkeypatch, "resolve", "--platform", "linux/ppc64le", "--project-root", str(project_root)
        )
        assert rc == 1
        assert "Unsupported platform" in capsys.readouterr().err

    def test_urls_honour_env_version(self, monkeypatch, capsys, project_root: Path) -> None:
        monkeypatch.setenv("HELM_VERSION", "3.14.0")
        rc = _main(
            monkeypatch, "urls", "--platform", "linux/amd64", "--project-root", str(project_root)
        )
        assert rc == 0
        assert "helm\thttps://get.helm.sh/helm-v3.14.0-linux-amd64.tar.gz" in capsys.readouterr().out

    def test_bad_config_exits_1(self, monkeypatch, capsys, project_root: Path) -> None:
        (project_root / "devops-tools.yaml").write_text("mode: sometimes\n")
        rc = _main(monkeypatch, "urls", "--project-root", str(project_root))
        assert rc == 1
        assert "Invalid mode" in capsys.readouterr().err

    def test_fetch_passes_mode_and_jobs(self, monkeypatch, project_root: Path) -> None:
        with patch("devops_tools.cli.tools_cmd.run_fetch", return_value=0) as m:
            rc = _main(
                monkeypatch,
                "fetch",
                "--platform",
                "linux/amd64",
                "--mode",
                "resilient",
                "--jobs",
                "3",
                "--dest",
                str(project_root / "bin"),
                "--project-root",
                str(project_root),
            )
        assert rc == 0
        tools, arch, dest = m.call_args.args
        assert arch == "amd64"
        assert dest == project_root / "bin"
        assert m.call_args.kwargs == {"mode": "resilient", "jobs": 3}
        assert "awscli" in [t.name for t in tools]

    def test_fetch_rejects_zero_jobs(self, monkeypatch, project_root: Path) -> None:
        rc = _main(monkeypatch, "fetch", "--jobs", "0", "--project-root", str(project_root))
        assert rc == 1

    def test_verify_in_image(self, monkeypatch, project_root: Path) -> None:
        with patch("devops_tools.cli.tools_cmd.run_verify", return_value=0) as m:
            rc = _main(
                monkeypatch,
                "verify",
                "--variant",
                "alpine",
                "--image",
                "toolbox:local-alpine",
                "--downloaded-only",
                "--project-root",
                str(project_root),
            )
        assert rc == 0
        tools = m.call_args.args[0]
        assert [t.name for t in tools] == ["terraform", "kubectl", "helm", "docker", "yq"]
        assert m.call_args.kwargs["exec_prefix"] == ["docker", "run", "--rm", "toolbox:local-alpine"]

    def test_docker_build_invalid_variant(self, monkeypatch, capsys, project_root: Path) -> None:
        rc = _main(monkeypatch, "docker", "build", "centos", "v1", "--project-root", str(project_root))
        assert rc == 1
        assert "Invalid variant: centos" in capsys.readouterr().err

    def test_docker_build_dry_run(self, monkeypatch, capsys, project_root: Path) -> None:
        monkeypatch.setenv("REGISTRY", "docker.io/acme")
        rc = _main(
            monkeypatch,
            "docker",
            "build",
            "alpine",
            "v3",
            "--mode",
            "resilient",
            "--dry-run",
            "--project-root",
            str(project_root),
        )
        assert rc == 0
        out = capsys.readouterr().out
        assert "docker.io/acme/toolbox:v3-alpine" in out
        assert "FAIL_MODE=resilient" in out

    def test_docker_build_bad_mode(self, monkeypatch, project_root: Path) -> None:
        rc = _main(
            monkeypatch, "docker", "build", "ubuntu", "--mode", "yolo", "--project-root", str(project_root)
        )
        assert rc == 1

    def test_docker_missing_subcommand(self, monkeypatch) -> None:
        assert _main(monkeypatch, "docker") == 1
