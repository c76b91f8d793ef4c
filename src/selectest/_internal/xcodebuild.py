"""Invoke xcodebuild as a subprocess."""

import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from selectest.logging import get_logger

logger = get_logger(__name__)


class XcodeBuildController:
    """Runs xcodebuild with the given arguments, streaming its output.

    A non-zero exit raises subprocess.CalledProcessError unchanged.
    """

    def __init__(self, command: Union[str, Sequence[str]] = "xcrun xcodebuild", cwd: Optional[Path] = None):
        self.command: List[str] = shlex.split(command) if isinstance(command, str) else list(command)
        if not self.command:
            raise ValueError("xcodebuild command must not be empty")
        self.cwd = cwd

    def run(self, arguments: Sequence[str]) -> None:
        cmd = [*self.command, *arguments]
        logger.debug("Invoking xcodebuild", command=cmd)
        subprocess.run(cmd, cwd=str(self.cwd) if self.cwd else None, check=True)
