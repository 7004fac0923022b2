"""docfx runner — invoke ``docfx metadata`` on whatever source is checked out."""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from unity_xrefmap.errors import SetupError

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Outcome of one metadata generation run."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0
    error: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0 and not self.error

    def describe(self) -> str:
        return self.error or f"exited with code {self.exit_code}"


class MetadataGenerator(Protocol):
    """Produces metadata files for the currently checked-out source."""

    def ensure_available(self) -> None: ...

    def generate(self) -> ToolResult: ...


class DocfxRunner:
    """Runs the metadata tool as a subprocess in ``working_dir``."""

    def __init__(
        self,
        command: list[str],
        working_dir: str | Path | None = None,
        timeout: float | None = None,
    ):
        """
        Args:
            command: Tool invocation, e.g. ``["docfx", "metadata"]``.
            working_dir: Directory holding ``docfx.json``. Defaults to cwd.
            timeout: Seconds before the run is killed; None waits forever.
        """
        if not command:
            raise SetupError("Metadata tool command is empty")
        self.command = list(command)
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self.timeout = timeout

    def ensure_available(self) -> None:
        """Raise SetupError if the tool executable cannot be found."""
        if shutil.which(self.command[0]) is None:
            raise SetupError(f"'{self.command[0]}' was not found on PATH")

    def generate(self) -> ToolResult:
        logger.info("Running %s", " ".join(self.command))

        start = time.monotonic()
        try:
            proc = subprocess.run(
                self.command,
                cwd=self.working_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return ToolResult(
                exit_code=-1,
                error=f"timed out after {self.timeout}s",
                duration_ms=int((time.monotonic() - start) * 1000),
            )
        except OSError as e:
            return ToolResult(exit_code=-1, error=str(e))

        for line in proc.stdout.splitlines():
            logger.debug("[docfx] %s", line)
        for line in proc.stderr.splitlines():
            if line.strip():
                logger.error("[docfx] %s", line)

        return ToolResult(
            exit_code=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
