import logging
import shutil
from typing import Callable, List, Optional

from packaging.version import InvalidVersion, Version

from ..config import Settings
from ..domain.models import Identifier, InstallContext, InstallPlan
from ..domain.specifier import HEAD
from ..process.runner import CommandRunner
from ..registry.cache import VersionCache
from ..registry.client import RegistryClient
from .install import FEATURE_NAME, build_install_plan
from .source import GitRemote, PackageSource, classify, git_url

logger = logging.getLogger(__name__)


class CargoBackend:
    """installs rust binaries with cargo install / cargo-binstall."""

    backend_type = "cargo"

    def __init__(
        self,
        identifier: Identifier,
        settings: Settings,
        registry: RegistryClient,
        version_cache: VersionCache,
        runner: Optional[CommandRunner] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        self.identifier = identifier
        self.settings = settings
        self.registry = registry
        self.version_cache = version_cache
        self.runner = runner or CommandRunner()
        self.which = which

    @property
    def name(self) -> str:
        return self.identifier.name

    def source(self) -> PackageSource:
        return classify(self.name)

    def git_url(self) -> Optional[str]:
        return git_url(self.name)

    def get_dependencies(self) -> List[str]:
        """tools that must be installed before this backend can run."""
        return ["cargo", "rust"]

    def is_binstall_enabled(self) -> bool:
        return self.settings.cargo_binstall and self.which("cargo-binstall") is not None

    def list_remote_versions(self) -> List[str]:
        if isinstance(self.source(), GitRemote):
            # git sources are installed from a ref, not a version list
            return [HEAD]
        return self.version_cache.get_or_compute(
            self.identifier.cache_key,
            lambda: self.registry.get_versions(self.name),
        )

    def latest_version(self) -> Optional[str]:
        """
        highest stable remote version.

        falls back to the highest prerelease when no stable release exists;
        versions that are not PEP 440 compatible are ignored.
        """
        if isinstance(self.source(), GitRemote):
            return HEAD
        versions = self.list_remote_versions()

        parsed = []
        for v in versions:
            try:
                parsed.append((Version(v), v))
            except InvalidVersion:
                logger.debug(f"skipping unparseable version {v!r} of {self.name}")
        if not parsed:
            return None

        stable = [p for p in parsed if not p[0].is_prerelease]
        candidates = stable or parsed
        return max(candidates, key=lambda p: p[0])[1]

    def build_plan(self, ctx: InstallContext) -> InstallPlan:
        return build_install_plan(
            self.identifier,
            ctx,
            experimental=self.settings.experimental,
            binstall=self.is_binstall_enabled(),
            github_token=self.settings.github_token,
        )

    def install_version(self, ctx: InstallContext) -> InstallPlan:
        """build the install plan and run it; returns the executed plan."""
        self.settings.ensure_experimental(FEATURE_NAME)
        plan = self.build_plan(ctx)
        self.runner.execute(plan)
        return plan
