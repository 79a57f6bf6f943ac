"""
Process Invoker — Runs external tools (FFmpeg, encoders) out of process.

Never raises for a failed tool: the outcome comes back as an
InvocationResult and the caller decides whether it matters.
"""

import shlex
import time
import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

logger = logging.getLogger(__name__)

Command = Union[str, Sequence[str]]


@dataclass
class InvocationResult:
    """Outcome of one external command."""
    command: List[str]
    returncode: Optional[int]  # None when the program could not be started
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def program(self) -> str:
        return self.command[0] if self.command else ""


class ProcessInvoker:
    """
    Spawns a command and waits for it to exit.

    Args:
        debug: Log the tool's stderr (at DEBUG) instead of keeping it quiet.
        log_spawn: Log every command line before it runs.
        launch_delay: Seconds to wait before spawning.
    """

    def __init__(self, debug: bool = False, log_spawn: bool = False,
                 launch_delay: float = 0.0):
        self.debug = debug
        self.log_spawn = log_spawn
        self.launch_delay = launch_delay

    def run(self, command: Command) -> InvocationResult:
        cmd = shlex.split(command) if isinstance(command, str) else [str(c) for c in command]
        if not cmd:
            raise ValueError("Empty command")

        if self.launch_delay > 0:
            time.sleep(self.launch_delay)

        if self.log_spawn:
            logger.info(f"Spawn: {' '.join(cmd)}")
        else:
            logger.debug(f"Spawn: {' '.join(cmd)}")

        try:
            proc = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            logger.warning(f"Could not start {cmd[0]}: {e}")
            return InvocationResult(cmd, None, str(e))

        result = InvocationResult(cmd, proc.returncode, proc.stderr or "")

        if self.debug and result.stderr.strip():
            for line in result.stderr.rstrip().splitlines():
                logger.debug(f"[{result.program}] {line}")

        if not result.ok:
            logger.warning(
                f"{result.program} exited with code {result.returncode}"
                + ("" if self.debug else " (use --debug to see its output)")
            )

        return result
