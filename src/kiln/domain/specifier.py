"""version specifiers accepted by the cargo backend.

a requested version is one of:

    HEAD            latest commit of a git source
    rev:<ref>       a specific git revision
    branch:<name>   tip of a git branch
    tag:<name>      a git tag
    <anything>      a registry version, passed through verbatim
"""
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


class Head(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["head"] = "head"


class Rev(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["rev"] = "rev"
    ref: str


class Branch(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["branch"] = "branch"
    name: str


class Tag(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["tag"] = "tag"
    name: str


class RegistryVersion(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["registry"] = "registry"
    version: str


VersionSpecifier = Union[Head, Rev, Branch, Tag, RegistryVersion]
GitSpecifier = Union[Head, Rev, Branch, Tag]

HEAD = "HEAD"

# checked in this order before falling back to HEAD / registry
_PREFIXES = (
    ("rev:", lambda value: Rev(ref=value)),
    ("branch:", lambda value: Branch(name=value)),
    ("tag:", lambda value: Tag(name=value)),
)

GIT_VERSION_HINT = """You can specify "rev:", "branch:", or "tag:", e.g.:
      * kiln install eza-community/eza tag:v0.18.0
      * kiln install eza-community/eza branch:main"""


def parse_version_specifier(version: str) -> VersionSpecifier:
    """parse a requested version string. never fails; unknown forms are registry versions."""
    for prefix, build in _PREFIXES:
        if version.startswith(prefix):
            return build(version[len(prefix):])
    if version == HEAD:
        return Head()
    return RegistryVersion(version=version)


def git_flags(spec: GitSpecifier) -> list:
    """cargo flags selecting a git ref; HEAD selects nothing."""
    if isinstance(spec, Rev):
        return [f"--rev={spec.ref}"]
    if isinstance(spec, Branch):
        return [f"--branch={spec.name}"]
    if isinstance(spec, Tag):
        return [f"--tag={spec.name}"]
    if isinstance(spec, Head):
        return []
    raise TypeError(f"not a git specifier: {spec!r}")
