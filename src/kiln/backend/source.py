from typing import Optional, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict

GITHUB_URL_TEMPLATE = "https://github.com/{user}/{repo}.git"


class GitRemote(BaseModel):
    model_config = ConfigDict(frozen=True)
    url: str


class Registry(BaseModel):
    model_config = ConfigDict(frozen=True)


PackageSource = Union[GitRemote, Registry]


def _is_absolute_url(name: str) -> bool:
    try:
        parts = urlsplit(name)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc or parts.path)


def git_url(name: str) -> Optional[str]:
    """
    if the name is a git repo, return the git url.

    `user/repo` is taken to mean a GitHub repository; whether it exists is
    not checked.
    """
    if _is_absolute_url(name):
        return name
    if name.count("/") == 1:
        user, repo = name.split("/")
        if user and repo:
            return GITHUB_URL_TEMPLATE.format(user=user, repo=repo)
    return None


def classify(name: str) -> PackageSource:
    url = git_url(name)
    if url is not None:
        return GitRemote(url=url)
    return Registry()
