"""cargo backend: version discovery and install planning."""
from .cargo import CargoBackend
from .install import build_install_plan
from .source import GitRemote, Registry, classify, git_url

__all__ = [
    "CargoBackend",
    "build_install_plan",
    "GitRemote",
    "Registry",
    "classify",
    "git_url",
]
