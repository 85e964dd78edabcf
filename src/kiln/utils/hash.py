import hashlib
import re

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def short_digest(text: str) -> str:
    """
    returns a short sha256 hash of the given text.
    """
    if not isinstance(text, str):
        raise TypeError(f"expected str, got {type(text).__name__}")

    digest = hashlib.sha256(text.encode()).hexdigest()
    return digest[:12]  # truncate for readability


def cache_key_for(backend: str, name: str) -> str:
    """
    returns a filesystem-safe cache key for a package name.

    the slug keeps keys readable, the digest keeps names that slug to the
    same text (e.g. `a/b` and `a-b`) apart.
    """
    slug = _UNSAFE_CHARS.sub("-", name).strip("-") or "_"
    return f"{backend}-{slug}-{short_digest(name)}"
