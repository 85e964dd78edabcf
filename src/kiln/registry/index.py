import json
import logging
import re
from typing import Iterator, List, Optional

import httpx
from pydantic import ValidationError

from ..domain.errors import DecodeFailure, MalformedLocator
from ..domain.models import RemoteVersionEntry
from .client import RegistryClient
from .http import HttpFetcher

logger = logging.getLogger(__name__)

CRATES_INDEX_URL = "https://index.crates.io"

# JSON whitespace between records
_WHITESPACE = re.compile(r"[ \t\n\r]*")


def crate_url(name: str, index_url: str = CRATES_INDEX_URL) -> str:
    """
    location of a crate's sparse-index document.

    the index shards names into directories by length and prefix:
        a     -> /1/a
        ab    -> /2/ab
        abc   -> /3/a/abc
        serde -> /se/rd/serde
    """
    n = name.lower()
    if not n:
        raise MalformedLocator("cannot build an index URL for an empty crate name")

    base = index_url.rstrip("/")
    if len(n) == 1:
        url = f"{base}/1/{n}"
    elif len(n) == 2:
        url = f"{base}/2/{n}"
    elif len(n) == 3:
        url = f"{base}/3/{n[:1]}/{n}"
    else:
        url = f"{base}/{n[:2]}/{n[2:4]}/{n}"

    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise MalformedLocator(f"invalid index URL {url!r}: {e}") from e
    if not parsed.is_absolute_url:
        raise MalformedLocator(f"invalid index URL {url!r}: not an absolute URL")
    return str(parsed)


def iter_entries(raw: str, source: str = "<registry>") -> Iterator[RemoteVersionEntry]:
    """
    decode a stream of JSON records, one value at a time.

    records are usually one per line but any JSON whitespace may separate them.
    """
    decoder = json.JSONDecoder()
    pos = _WHITESPACE.match(raw, 0).end()
    while pos < len(raw):
        try:
            record, pos = decoder.raw_decode(raw, pos)
        except json.JSONDecodeError as e:
            raise DecodeFailure(source, str(e)) from e
        try:
            yield RemoteVersionEntry.model_validate(record)
        except ValidationError as e:
            raise DecodeFailure(source, str(e)) from e
        pos = _WHITESPACE.match(raw, pos).end()


def visible_versions(raw: str, source: str = "<registry>") -> List[str]:
    """versions of a sparse-index document with yanked releases removed."""
    return [entry.vers for entry in iter_entries(raw, source) if not entry.yanked]


class CratesIndex(RegistryClient):
    """crates.io sparse index client."""

    def __init__(self, index_url: str = CRATES_INDEX_URL, fetcher: Optional[HttpFetcher] = None):
        self.index_url = index_url.rstrip("/")
        self.fetcher = fetcher or HttpFetcher()

    def package_url(self, package_name: str) -> str:
        return crate_url(package_name, self.index_url)

    def get_versions(self, package_name: str) -> List[str]:
        url = self.package_url(package_name)
        raw = self.fetcher.get_text(url)
        versions = visible_versions(raw, url)
        logger.debug(f"{package_name}: {len(versions)} visible versions at {url}")
        return versions

    def close(self) -> None:
        self.fetcher.close()
