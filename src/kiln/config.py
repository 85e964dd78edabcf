import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from pydantic import BaseModel

from .domain.errors import ConfigError, ExperimentalFeatureDisabled

CONFIG_DIR = Path.home() / ".kiln"
CONFIG_FILE = CONFIG_DIR / "config"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class Settings(BaseModel):
    """resolved configuration; passed explicitly to the components that need it."""
    experimental: bool = False
    cargo_binstall: bool = True
    github_token: Optional[str] = None
    cache_dir: Path = CONFIG_DIR / "cache"
    data_dir: Path = CONFIG_DIR
    index_url: str = "https://index.crates.io"
    cache_ttl_hours: float = 24

    def ensure_experimental(self, feature: str):
        if not self.experimental:
            raise ExperimentalFeatureDisabled(feature)

    def install_path(self, cache_key: str, version: str) -> Path:
        return self.data_dir / "installs" / cache_key / version.replace("/", "-")


def parse_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    raise ConfigError(f"invalid boolean value: {value!r}")


def read_config_file(config_file: Path = CONFIG_FILE) -> Dict[str, str]:
    """read KEY=value lines from the config file."""
    config = {}
    if not config_file.exists():
        return config

    try:
        with open(config_file, "r") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                config[key.strip()] = value.strip()
    except (IOError, PermissionError, OSError):
        # if we can't read the file, treat as not configured
        return {}
    return config


def set_config_value(key: str, value: str, config_file: Path = CONFIG_FILE):
    """set a value in the config file, preserving other config values."""
    config_file.parent.mkdir(parents=True, exist_ok=True)

    config = read_config_file(config_file)
    config[key] = value

    try:
        with open(config_file, "w") as f:
            for k, v in config.items():
                f.write(f"{k}={v}\n")
    except (IOError, PermissionError, OSError) as e:
        raise RuntimeError(f"failed to write config file: {e}") from e


def load_settings(environ: Optional[Mapping[str, str]] = None, config_file: Optional[Path] = None) -> Settings:
    """
    build settings from the config file and environment.

    environment variables take precedence over the config file. the github
    token is only ever read from the environment.
    """
    environ = os.environ if environ is None else environ
    config_file = CONFIG_FILE if config_file is None else config_file

    values = {**read_config_file(config_file), **environ}

    fields = {}
    if values.get("KILN_EXPERIMENTAL") is not None:
        fields["experimental"] = parse_bool(values["KILN_EXPERIMENTAL"])
    if values.get("KILN_CARGO_BINSTALL") is not None:
        fields["cargo_binstall"] = parse_bool(values["KILN_CARGO_BINSTALL"])
    if values.get("KILN_CACHE_DIR"):
        fields["cache_dir"] = Path(values["KILN_CACHE_DIR"]).expanduser()
    if values.get("KILN_DATA_DIR"):
        fields["data_dir"] = Path(values["KILN_DATA_DIR"]).expanduser()
        fields.setdefault("cache_dir", fields["data_dir"] / "cache")
    if values.get("KILN_CARGO_INDEX_URL"):
        fields["index_url"] = values["KILN_CARGO_INDEX_URL"]
    if values.get("KILN_CACHE_TTL_HOURS"):
        try:
            fields["cache_ttl_hours"] = float(values["KILN_CACHE_TTL_HOURS"])
        except ValueError as e:
            raise ConfigError(f"invalid KILN_CACHE_TTL_HOURS: {e}") from e

    token = environ.get("GITHUB_TOKEN") or environ.get("GITHUB_API_TOKEN")
    if token:
        fields["github_token"] = token

    return Settings(**fields)
