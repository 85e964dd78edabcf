"""test suite for install plan execution."""
import os
import pytest
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from kiln.domain.errors import ExecutionFailure
from kiln.domain.models import InstallPlan
from kiln.process.runner import CommandRunner


def python_plan(tmp_path, code, **kwargs) -> InstallPlan:
    return InstallPlan(program=sys.executable, args=["-c", code], root=tmp_path / "root", **kwargs)


class TestEnvironment:
    def test_overlay(self, tmp_path):
        runner = CommandRunner(base_env={"PATH": "/usr/bin", "HOME": "/home/me"})
        plan = InstallPlan(program="cargo", env={"GITHUB_TOKEN": "tok"}, root=tmp_path)
        env = runner.environment(plan)
        assert env == {"PATH": "/usr/bin", "HOME": "/home/me", "GITHUB_TOKEN": "tok"}

    def test_paths_prepended(self, tmp_path):
        runner = CommandRunner(base_env={"PATH": "/usr/bin"})
        plan = InstallPlan(program="cargo", root=tmp_path, paths=[Path("/opt/rust/bin"), Path("/opt/x/bin")])
        env = runner.environment(plan)
        assert env["PATH"] == os.pathsep.join(["/opt/rust/bin", "/opt/x/bin", "/usr/bin"])

    def test_paths_without_existing_path(self, tmp_path):
        runner = CommandRunner(base_env={})
        plan = InstallPlan(program="cargo", root=tmp_path, paths=[Path("/opt/rust/bin")])
        assert runner.environment(plan)["PATH"] == "/opt/rust/bin"

    def test_defaults_to_process_environment(self, tmp_path):
        with patch.dict(os.environ, {"KILN_TEST_MARKER": "1"}):
            env = CommandRunner().environment(InstallPlan(program="cargo", root=tmp_path))
        assert env["KILN_TEST_MARKER"] == "1"


class TestExecute:
    def test_success_returns_output(self, tmp_path):
        plan = python_plan(tmp_path, "print('compiled')")
        output = CommandRunner().execute(plan)
        assert "compiled" in output
        assert plan.root.is_dir()

    def test_env_reaches_process(self, tmp_path):
        plan = python_plan(tmp_path, "import os; print(os.environ['GITHUB_TOKEN'])", env={"GITHUB_TOKEN": "tok"})
        assert CommandRunner().execute(plan).strip() == "tok"

    def test_nonzero_exit(self, tmp_path):
        plan = python_plan(tmp_path, "import sys; print('error: linking failed'); sys.exit(101)")
        with pytest.raises(ExecutionFailure) as exc_info:
            CommandRunner().execute(plan)
        assert exc_info.value.returncode == 101
        assert "linking failed" in exc_info.value.output
        assert "linking failed" in str(exc_info.value)

    def test_stderr_captured(self, tmp_path):
        plan = python_plan(tmp_path, "import sys; sys.stderr.write('warning: x\\n'); sys.exit(2)")
        with pytest.raises(ExecutionFailure) as exc_info:
            CommandRunner().execute(plan)
        assert "warning: x" in exc_info.value.output

    def test_missing_program(self, tmp_path):
        plan = InstallPlan(program="kiln-no-such-program", root=tmp_path)
        with patch("kiln.process.runner.subprocess.run", side_effect=FileNotFoundError("not found")):
            with pytest.raises(ExecutionFailure) as exc_info:
                CommandRunner().execute(plan)
        assert exc_info.value.returncode == 127

    def test_command_passed_through(self, tmp_path):
        plan = InstallPlan(program="cargo", args=["install", "ripgrep@14.1.0"], root=tmp_path)
        completed = subprocess.CompletedProcess(plan.command, 0, stdout="ok")
        with patch("kiln.process.runner.subprocess.run", return_value=completed) as mock_run:
            CommandRunner(base_env={}).execute(plan)
        args, kwargs = mock_run.call_args
        assert args[0] == ["cargo", "install", "ripgrep@14.1.0"]
        assert kwargs["text"] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
