import logging
from typing import Dict, List, Optional

from ..domain.errors import ExperimentalFeatureDisabled, InvalidVersionSpec
from ..domain.models import Identifier, InstallContext, InstallPlan
from ..domain.specifier import (
    GIT_VERSION_HINT,
    RegistryVersion,
    git_flags,
    parse_version_specifier,
)
from .source import GitRemote, classify

logger = logging.getLogger(__name__)

FEATURE_NAME = "cargo backend"


def build_install_plan(
    identifier: Identifier,
    ctx: InstallContext,
    *,
    experimental: bool,
    binstall: bool,
    github_token: Optional[str] = None,
) -> InstallPlan:
    """
    translate a requested version into a cargo invocation.

    args:
        identifier: package being installed
        ctx: requested version, install root and toolset environment
        experimental: whether the user opted into experimental backends
        binstall: whether cargo-binstall is enabled and present
        github_token: forwarded to cargo-binstall to raise GitHub rate limits

    raises:
        ExperimentalFeatureDisabled: if experimental is false
        InvalidVersionSpec: if a git source is given a plain registry version
    """
    # cargo runs arbitrary build scripts from the registry
    if not experimental:
        raise ExperimentalFeatureDisabled(FEATURE_NAME)

    spec = parse_version_specifier(ctx.version)
    source = classify(identifier.name)
    env: Dict[str, str] = {}

    if isinstance(source, GitRemote):
        if isinstance(spec, RegistryVersion):
            raise InvalidVersionSpec(
                f"Invalid cargo git version: {ctx.version}",
                hint=GIT_VERSION_HINT,
            )
        program = "cargo"
        args: List[str] = ["install", f"--git={source.url}", *git_flags(spec)]
    else:
        # registry versions go to cargo verbatim
        install_arg = f"{identifier.name}@{ctx.version}"
        if binstall:
            program = "cargo-binstall"
            args = ["-y", install_arg]
            if github_token:
                env["GITHUB_TOKEN"] = github_token
        else:
            program = "cargo"
            args = ["install", install_arg]

    args += ["--locked", "--root", str(ctx.install_path)]
    env.update(ctx.env)

    plan = InstallPlan(
        program=program,
        args=args,
        env=env,
        root=ctx.install_path,
        paths=list(ctx.paths),
    )
    logger.debug(f"install plan for {identifier}: {' '.join(plan.command)}")
    return plan
