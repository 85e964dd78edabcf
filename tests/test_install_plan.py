"""test suite for install plan construction."""
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from kiln.backend.install import build_install_plan
from kiln.domain.errors import ExperimentalFeatureDisabled, InvalidVersionSpec
from kiln.domain.models import Identifier, InstallContext

ROOT = Path("/opt/kiln/installs/ripgrep/14.1.0")


def ctx(version: str, **kwargs) -> InstallContext:
    return InstallContext(version=version, install_path=ROOT, **kwargs)


def build(name: str, version: str, binstall: bool = False, github_token=None, **ctx_kwargs):
    return build_install_plan(
        Identifier(name=name),
        ctx(version, **ctx_kwargs),
        experimental=True,
        binstall=binstall,
        github_token=github_token,
    )


class TestExperimentalGuard:
    def test_disabled(self):
        with pytest.raises(ExperimentalFeatureDisabled):
            build_install_plan(Identifier(name="ripgrep"), ctx("14.1.0"), experimental=False, binstall=False)

    def test_checked_before_version(self):
        # an invalid git version still reports the experimental guard first
        with pytest.raises(ExperimentalFeatureDisabled):
            build_install_plan(Identifier(name="user/repo"), ctx("1.0.0"), experimental=False, binstall=False)


class TestGitInstall:
    @pytest.mark.parametrize("version, flags", [
        ("HEAD", []),
        ("rev:abc123", ["--rev=abc123"]),
        ("branch:main", ["--branch=main"]),
        ("tag:v0.18.0", ["--tag=v0.18.0"]),
    ])
    def test_git_refs(self, version, flags):
        plan = build("eza-community/eza", version)
        assert plan.program == "cargo"
        assert plan.args == [
            "install",
            "--git=https://github.com/eza-community/eza.git",
            *flags,
            "--locked",
            "--root",
            str(ROOT),
        ]

    def test_full_url(self):
        plan = build("https://gitlab.com/user/tool.git", "tag:v1")
        assert plan.args[:3] == ["install", "--git=https://gitlab.com/user/tool.git", "--tag=v1"]

    def test_registry_version_rejected(self):
        with pytest.raises(InvalidVersionSpec) as exc_info:
            build("eza-community/eza", "1.2.3")
        message = str(exc_info.value)
        assert "1.2.3" in message
        for prefix in ("rev:", "branch:", "tag:"):
            assert prefix in exc_info.value.hint

    def test_binstall_ignored_for_git(self):
        plan = build("eza-community/eza", "HEAD", binstall=True, github_token="tok")
        assert plan.program == "cargo"
        assert "GITHUB_TOKEN" not in plan.env


class TestRegistryInstall:
    def test_standard(self):
        plan = build("ripgrep", "14.1.0")
        assert plan.command == ["cargo", "install", "ripgrep@14.1.0", "--locked", "--root", str(ROOT)]
        assert plan.root == ROOT

    def test_binstall(self):
        plan = build("ripgrep", "14.1.0", binstall=True)
        assert plan.command == ["cargo-binstall", "-y", "ripgrep@14.1.0", "--locked", "--root", str(ROOT)]
        assert plan.env == {}

    def test_binstall_token(self):
        plan = build("ripgrep", "14.1.0", binstall=True, github_token="ghp_secret")
        assert plan.env == {"GITHUB_TOKEN": "ghp_secret"}

    def test_token_not_used_without_binstall(self):
        plan = build("ripgrep", "14.1.0", github_token="ghp_secret")
        assert "GITHUB_TOKEN" not in plan.env

    @pytest.mark.parametrize("version", ["HEAD", "rev:abc", "branch:main", "tag:v1"])
    def test_git_style_versions_passed_through(self, version):
        plan = build("ripgrep", version)
        assert plan.command == ["cargo", "install", f"ripgrep@{version}", "--locked", "--root", str(ROOT)]

    def test_git_style_version_with_binstall(self):
        plan = build("ripgrep", "HEAD", binstall=True)
        assert plan.args[:2] == ["-y", "ripgrep@HEAD"]

    def test_version_used_verbatim(self):
        plan = build("ripgrep", "^14")
        assert "ripgrep@^14" in plan.args


class TestContextOverlay:
    def test_env_and_paths(self):
        paths = [Path("/opt/rust/bin"), Path("/opt/cargo/bin")]
        plan = build("ripgrep", "14.1.0", env={"RUSTFLAGS": "-C opt-level=3"}, paths=paths)
        assert plan.env == {"RUSTFLAGS": "-C opt-level=3"}
        assert plan.paths == paths

    def test_context_env_overrides_token(self):
        plan = build("ripgrep", "14.1.0", binstall=True, github_token="a", env={"GITHUB_TOKEN": "b"})
        assert plan.env["GITHUB_TOKEN"] == "b"

    def test_idempotent(self):
        kwargs = dict(binstall=True, github_token="tok", env={"A": "1"}, paths=[Path("/bin")])
        assert build("ripgrep", "14.1.0", **kwargs) == build("ripgrep", "14.1.0", **kwargs)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
