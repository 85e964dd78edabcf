from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils.hash import cache_key_for


class Identifier(BaseModel):
    """identifies the package being resolved (crate name, git URL or user/repo)."""
    model_config = ConfigDict(frozen=True)

    name: str
    cache_key: str = ""

    @model_validator(mode="before")
    @classmethod
    def _derive_cache_key(cls, data):
        # the cache key is always a function of the name
        if isinstance(data, dict) and isinstance(data.get("name"), str):
            data = {**data, "cache_key": cache_key_for("cargo", data["name"].strip())}
        return data

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("package name cannot be empty")
        return value

    def __str__(self) -> str:
        return f"cargo:{self.name}"


class RemoteVersionEntry(BaseModel):
    """one record of a sparse-index document; unknown fields are ignored."""
    # "true" or 0 are not booleans
    model_config = ConfigDict(strict=True)

    vers: str
    yanked: bool


class InstallContext(BaseModel):
    """install-time context handed to the backend by the orchestrator."""
    version: str
    install_path: Path
    env: Dict[str, str] = Field(default_factory=dict)  # toolset environment overlay
    paths: List[Path] = Field(default_factory=list)  # bin dirs of installed tools


class InstallPlan(BaseModel):
    """a fully resolved external-process invocation."""
    model_config = ConfigDict(frozen=True)

    program: str
    args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)
    root: Path
    paths: List[Path] = Field(default_factory=list)

    @property
    def command(self) -> List[str]:
        return [self.program, *self.args]
