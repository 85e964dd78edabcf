import logging
import os
import subprocess
from typing import Dict, Mapping, Optional

from ..domain.errors import ExecutionFailure
from ..domain.models import InstallPlan

logger = logging.getLogger(__name__)


class CommandRunner:
    """runs install plans as subprocesses and captures their output."""

    def __init__(self, base_env: Optional[Mapping[str, str]] = None):
        self.base_env = base_env

    def environment(self, plan: InstallPlan) -> Dict[str, str]:
        """process environment with the plan's overlay and PATH entries applied."""
        env = dict(os.environ if self.base_env is None else self.base_env)
        env.update(plan.env)
        if plan.paths:
            current = env.get("PATH", "")
            prefix = os.pathsep.join(str(p) for p in plan.paths)
            env["PATH"] = f"{prefix}{os.pathsep}{current}" if current else prefix
        return env

    def execute(self, plan: InstallPlan) -> str:
        """
        run the plan and return its combined output.

        raises:
            ExecutionFailure: if the program is missing or exits nonzero
        """
        plan.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"running {' '.join(plan.command)}")
        try:
            result = subprocess.run(
                plan.command,
                env=self.environment(plan),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except FileNotFoundError as e:
            raise ExecutionFailure(plan.program, 127, str(e)) from e

        output = result.stdout or ""
        if output:
            logger.debug(output.rstrip())
        if result.returncode != 0:
            raise ExecutionFailure(plan.program, result.returncode, output)
        return output
