"""External effective-POM rendering.

Runs ``mvn help:effective-pom`` for a single descriptor. The call is
synchronous, bounded by a timeout and cancellable through a
``threading.Event``. Every failure surfaces as ResolutionUnavailable so the
caller can fall back to local-only resolution.
"""

import logging
import os
import shutil
import subprocess
import tempfile
import threading
import time
from pathlib import Path
from typing import Optional

from .errors import ResolutionUnavailable

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0
POLL_INTERVAL = 0.2


class EffectivePomRenderer:
    """Render effective POMs through the project's Maven installation.

    Args:
        maven_command: Explicit Maven executable. When ``None`` the project's
            ``mvnw`` wrapper is preferred, then ``mvn`` on ``PATH``.
        timeout: Seconds before the process is killed.
    """

    def __init__(self, maven_command: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT):
        self.maven_command = maven_command
        self.timeout = timeout

    def command_for(self, pom_path: Path) -> list:
        if self.maven_command:
            return [self.maven_command]
        wrapper = pom_path.parent / ("mvnw.cmd" if os.name == "nt" else "mvnw")
        if wrapper.is_file():
            return [str(wrapper)]
        mvn = shutil.which("mvn")
        if mvn is None:
            raise ResolutionUnavailable(pom_path, "no mvnw wrapper and mvn is not on PATH")
        return [mvn]

    def render(self, pom_path: Path, cancel: Optional[threading.Event] = None) -> str:
        """Return the effective POM text for ``pom_path``.

        Raises:
            ResolutionUnavailable: On missing Maven, non-zero exit, timeout,
                cancellation or missing output.
        """
        pom_path = Path(pom_path)
        with tempfile.TemporaryDirectory(prefix="appdetect-") as tmp:
            output = Path(tmp) / "effective-pom.xml"
            cmd = self.command_for(pom_path) + [
                "--batch-mode", "--non-recursive",
                "-f", str(pom_path),
                "help:effective-pom",
                f"-Doutput={output}",
            ]
            logger.debug("Running %s", " ".join(cmd))
            try:
                proc = subprocess.Popen(
                    cmd,
                    cwd=pom_path.parent,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    encoding="utf-8",
                    errors="replace",
                )
            except OSError as e:
                raise ResolutionUnavailable(pom_path, f"cannot start {cmd[0]}: {e}") from e

            stdout, _ = self._wait(proc, pom_path, cancel)
            stdout = stdout or ""
            if proc.returncode != 0:
                tail = "\n".join(stdout.strip().splitlines()[-5:])
                raise ResolutionUnavailable(pom_path, f"exit code {proc.returncode}: {tail}")
            try:
                return output.read_text(encoding="utf-8")
            except OSError as e:
                raise ResolutionUnavailable(pom_path, f"no effective POM written: {e}") from e
            except UnicodeDecodeError as e:
                raise ResolutionUnavailable(pom_path, f"effective POM is not UTF-8: {e}") from e

    def _wait(self, proc, pom_path: Path, cancel: Optional[threading.Event]) -> tuple:
        deadline = time.monotonic() + self.timeout
        while True:
            try:
                return proc.communicate(timeout=POLL_INTERVAL)
            except subprocess.TimeoutExpired:
                if cancel is not None and cancel.is_set():
                    reason = "cancelled"
                elif time.monotonic() >= deadline:
                    reason = f"timed out after {self.timeout:g}s"
                else:
                    continue
                proc.kill()
                proc.communicate()
                raise ResolutionUnavailable(pom_path, reason)
