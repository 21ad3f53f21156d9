"""Tool descriptors: download URL templates, archive layout, arch naming, verify command."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from devops_tools.arch.resolve import UNAME_ARCH_MAP, tool_arch

DEFAULT_VERSIONS: dict[str, str] = {
    "terraform": "1.5.0",
    "kubectl": "1.28.0",
    "helm": "3.12.0",
    "awscli": "2.13.25",
    "docker": "24.0.6",
    "yq": "4.35.2",
}

VARIANT_NAMES = ("ubuntu", "alpine")


@dataclass(frozen=True)
class ToolDescriptor:
    """One bundled tool.

    source is "download" (fetched in the builder stage), "package" (OS package
    manager in the runtime stage) or "pip". url and member may use {version}
    and {arch}; {arch} is the tool's own arch name from arch_map.
    """

    name: str
    verify: tuple[str, ...]
    version: str | None = None
    source: str = "download"
    url: str | None = None
    archive: str = "binary"
    member: str | None = None
    arch_map: dict[str, str] = field(default_factory=dict)
    installer: tuple[str, ...] = ()
    expect_version: bool = True

    @property
    def downloadable(self) -> bool:
        return self.source == "download" and self.url is not None

    @property
    def env_var(self) -> str:
        """Build-arg / environment name carrying this tool's version, e.g. TERRAFORM_VERSION."""
        return f"{self.name.upper()}_VERSION"


DEFAULT_TOOLS: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name="terraform",
        version=DEFAULT_VERSIONS["terraform"],
        url="https://releases.hashicorp.com/terraform/{version}/terraform_{version}_linux_{arch}.zip",
        archive="zip",
        member="terraform",
        verify=("terraform", "version"),
    ),
    ToolDescriptor(
        name="kubectl",
        version=DEFAULT_VERSIONS["kubectl"],
        url="https://dl.k8s.io/release/v{version}/bin/linux/{arch}/kubectl",
        verify=("kubectl", "version", "--client"),
    ),
    ToolDescriptor(
        name="helm",
        version=DEFAULT_VERSIONS["helm"],
        url="https://get.helm.sh/helm-v{version}-linux-{arch}.tar.gz",
        archive="tar.gz",
        member="linux-{arch}/helm",
        verify=("helm", "version"),
    ),
    ToolDescriptor(
        name="awscli",
        version=DEFAULT_VERSIONS["awscli"],
        url="https://awscli.amazonaws.com/awscli-exe-linux-{arch}-{version}.zip",
        archive="zip",
        member="aws/install",
        arch_map=UNAME_ARCH_MAP,
        installer=("--install-dir", "{prefix}/aws-cli", "--bin-dir", "{bin_dir}", "--update"),
        verify=("aws", "--version"),
    ),
    ToolDescriptor(
        name="docker",
        version=DEFAULT_VERSIONS["docker"],
        url="https://download.docker.com/linux/static/stable/{arch}/docker-{version}.tgz",
        archive="tar.gz",
        member="docker/docker",
        arch_map=UNAME_ARCH_MAP,
        verify=("docker", "--version"),
    ),
    ToolDescriptor(
        name="yq",
        version=DEFAULT_VERSIONS["yq"],
        url="https://github.com/mikefarah/yq/releases/download/v{version}/yq_linux_{arch}",
        verify=("yq", "--version"),
    ),
    ToolDescriptor(name="git", source="package", verify=("git", "--version"), expect_version=False),
    ToolDescriptor(name="jq", source="package", verify=("jq", "--version"), expect_version=False),
)


def _with_version(tool: ToolDescriptor, versions: dict[str, str] | None) -> ToolDescriptor:
    if tool.version is None or not versions or tool.name not in versions:
        return tool
    return replace(tool, version=str(versions[tool.name]))


def tools_for_variant(
    variant: str, versions: dict[str, str] | None = None
) -> list[ToolDescriptor]:
    """Descriptors for an image variant with version overrides applied.

    AWS CLI v2 release binaries are glibc-linked, so on alpine it is a pip tool
    with whatever version pip resolves.
    """
    if variant not in VARIANT_NAMES:
        msg = f"Invalid variant: {variant}. Use {' or '.join(repr(v) for v in VARIANT_NAMES)}"
        raise ValueError(msg)
    out: list[ToolDescriptor] = []
    for tool in DEFAULT_TOOLS:
        if variant == "alpine" and tool.name == "awscli":
            out.append(
                ToolDescriptor(
                    name="awscli",
                    source="pip",
                    verify=tool.verify,
                    expect_version=False,
                )
            )
            continue
        out.append(_with_version(tool, versions))
    return out


def get_tool(tools: list[ToolDescriptor], name: str) -> ToolDescriptor:
    for t in tools:
        if t.name == name:
            return t
    msg = f"Unknown tool: {name}"
    raise KeyError(msg)


def resolve_url(tool: ToolDescriptor, arch: str) -> str:
    """Download URL for tool on a normalized arch. Raises ValueError for non-download tools."""
    if not tool.downloadable:
        msg = f"{tool.name} is installed via {tool.source}, not downloaded"
        raise ValueError(msg)
    return tool.url.format(version=tool.version, arch=tool_arch(arch, tool.arch_map))


def resolve_member(tool: ToolDescriptor, arch: str) -> str | None:
    if tool.member is None:
        return None
    return tool.member.format(version=tool.version, arch=tool_arch(arch, tool.arch_map))


def resolve_urls(tools: list[ToolDescriptor], arch: str) -> dict[str, str]:
    """name -> URL for every downloadable tool, in catalog order."""
    return {t.name: resolve_url(t, arch) for t in tools if t.downloadable}
