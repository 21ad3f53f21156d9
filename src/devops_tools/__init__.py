"""Build, fetch and verify the DevOps tools container images."""

__version__ = "1.0.0"
