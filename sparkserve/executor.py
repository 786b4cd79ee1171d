"""
ProcessExecutor - run the spark-submit launcher as a child process.

Three output modes:
- discard: output goes to /dev/null (fire-and-forget submit/kill)
- capture: stdout and stderr merged into one ordered buffer (status queries)
- stream: each output line is logged at DEBUG level (debug submit mode)

The call blocks until the child exits. Whether that is the request thread or
a background thread is the caller's decision.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from sparkserve.errors import LauncherError

LOGGER = logging.getLogger(__name__)


class ProcessExecutor:
    """
    Runs the launcher binary with a given argument list.

    The child inherits the parent's working directory and environment.
    """

    def __init__(self, binary_path: Path | str, logger: Optional[logging.Logger] = None):
        """
        Initialize the executor.

        Args:
            binary_path: Path to the spark-submit binary
            logger: Logger for invocations and streamed output
        """
        self.binary_path = Path(binary_path)
        self.logger = logger or LOGGER

    def run(
        self,
        args: Sequence[str],
        capture_output: bool = False,
        stream_output: bool = False,
    ) -> str:
        """
        Run the launcher and wait for it to exit.

        Args:
            args: Launcher arguments
            capture_output: Return combined stdout/stderr
            stream_output: Log each output line at DEBUG level
                (ignored when capture_output is set)

        Returns:
            Captured output when capture_output is set, otherwise ""

        Raises:
            LauncherError: If the launcher cannot be started or exits non-zero
        """
        cmd = [str(self.binary_path), *args]
        self.logger.info(
            f"spark-submit {' '.join(args)}",
            extra={"event": "launcher_started", "metadata": {"args": list(args)}},
        )

        try:
            if capture_output:
                returncode, output = self._run_captured(cmd)
            elif stream_output:
                returncode, output = self._run_streamed(cmd), ""
            else:
                returncode, output = self._run_discarded(cmd), ""
        except OSError as e:
            raise LauncherError(
                f"spark-submit failed to start: {e}", args_list=args
            ) from e

        if returncode != 0:
            raise LauncherError(
                f"spark-submit exited with status {returncode}",
                args_list=args,
                returncode=returncode,
                output=output,
            )
        return output

    def _run_captured(self, cmd: list[str]) -> tuple[int, str]:
        completed = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
        return completed.returncode, completed.stdout.decode("utf-8", errors="replace")

    def _run_streamed(self, cmd: list[str]) -> int:
        with subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        ) as proc:
            for raw_line in proc.stdout:
                line = raw_line.decode("utf-8", errors="replace").rstrip("\r\n")
                if line:
                    self.logger.debug(line, extra={"event": "launcher_output"})
            return proc.wait()

    def _run_discarded(self, cmd: list[str]) -> int:
        completed = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        return completed.returncode

    def __repr__(self) -> str:
        return f"ProcessExecutor(binary_path={self.binary_path})"
