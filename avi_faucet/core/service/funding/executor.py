"""
External process execution for the CLI and proof-of-work strategies.
"""

import asyncio
import os
import shutil
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from pydantic import BaseModel

from avi_faucet.core.logger.logger import get_logger

logger = get_logger(__name__)

COMMAND_NOT_FOUND = 127


class ExecutionResult(BaseModel):
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ExternalExecutor(ABC):
    """Capability for locating and running external tools."""

    @abstractmethod
    def which(self, name: str) -> Optional[str]:
        """Resolve an executable name against PATH"""
        pass

    @abstractmethod
    def is_executable(self, path: str) -> bool:
        """Check that a concrete path points at a runnable file"""
        pass

    @abstractmethod
    async def run(self, argv: Sequence[str], inherit_io: bool = False) -> ExecutionResult:
        """
        Run a command to completion.

        Args:
            argv: Program and arguments, no shell involved
            inherit_io: Share this process's stdin/stdout/stderr with the child

        Returns:
            ExecutionResult; a missing program yields returncode 127
        """
        pass


class SubprocessExecutor(ExternalExecutor):
    """Runs tools with asyncio subprocesses. No time limit, no cancellation."""

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)

    def is_executable(self, path: str) -> bool:
        expanded = os.path.expanduser(path)
        return os.path.isfile(expanded) and os.access(expanded, os.X_OK)

    async def run(self, argv: Sequence[str], inherit_io: bool = False) -> ExecutionResult:
        args: List[str] = [str(arg) for arg in argv]
        logger.debug("Spawning external command", extra={"argv": args, "inherit_io": inherit_io})

        pipe = None if inherit_io else asyncio.subprocess.PIPE
        try:
            process = await asyncio.create_subprocess_exec(*args, stdout=pipe, stderr=pipe)
        except FileNotFoundError as e:
            logger.error(f"Executable not found: {args[0]}")
            return ExecutionResult(returncode=COMMAND_NOT_FOUND, stderr=str(e))

        stdout, stderr = await process.communicate()

        return ExecutionResult(
            returncode=process.returncode,
            stdout=stdout.decode(errors="replace") if stdout else "",
            stderr=stderr.decode(errors="replace") if stderr else "",
        )
