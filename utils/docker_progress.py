import logging
import subprocess
import platform
from rich.console import Console
from rich.spinner import Spinner
from rich.live import Live
from typing import List, Optional

from utils.errors import ExternalToolError

# Platform detection for compatible symbols
IS_WINDOWS = platform.system().lower() == 'windows'

if IS_WINDOWS:
    SYMBOL_SUCCESS = "[OK]"
    SYMBOL_FAILED = "[X]"
    SPINNER_STYLE = "line"
else:
    SYMBOL_SUCCESS = "✅"
    SYMBOL_FAILED = "❌"
    SPINNER_STYLE = "dots"

console = Console()
_log = logging.getLogger(__name__)


class DockerProgressMonitor:
    """Context manager for Docker operations with progress feedback."""

    def __init__(self, message: str = "Docker operation in progress"):
        self.message = message
        self.spinner = Spinner(SPINNER_STYLE, text=f"│     {message}")
        self.live = None
        self.result = None
        self.success = False

    def __enter__(self):
        """Start the spinner display."""
        self.live = Live(self.spinner, console=console, refresh_per_second=10, transient=True)
        self.live.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Stop the spinner and show final status."""
        if self.live:
            self.live.stop()

        if self.success:
            console.print(f"  │     {SYMBOL_SUCCESS} {self.message} - Complete!", style="bold green")
        elif exc_type is not None:
            console.print(f"  │     {SYMBOL_FAILED} {self.message} - Failed (Exception)", style="bold red")
        elif self.result and self.result.returncode != 0:
            console.print(f"  │     {SYMBOL_FAILED} {self.message} - Failed", style="bold red")

    def set_result(self, result):
        """Set subprocess result and determine success status."""
        self.result = result
        self.success = result.returncode == 0


def run_command_with_progress(
    command,
    message: str,
    shell: bool = False,
    cwd: Optional[str] = None,
    encoding: str = 'utf-8',
    errors: str = 'ignore'
) -> subprocess.CompletedProcess:
    """Run a command with a progress spinner, capturing its output.

    A missing executable is reported as ExternalToolError with status 127,
    the same status a shell would give.
    """
    _log.debug("running %s (cwd=%s)", command, cwd)
    with DockerProgressMonitor(message) as monitor:
        try:
            result = subprocess.run(
                command,
                shell=shell,
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding=encoding,
                errors=errors
            )
        except FileNotFoundError as e:
            cmd = command if isinstance(command, list) else [command]
            raise ExternalToolError(cmd, 127, str(e))
        monitor.set_result(result)

    _log.debug("%s exited with %s", command, result.returncode)
    return result


def run_docker_with_progress(
    command: List[str],
    message: str,
    cwd: Optional[str] = None
) -> subprocess.CompletedProcess:
    """Run a Docker command with progress spinner."""
    return run_command_with_progress(command, message, cwd=cwd)


def filter_docker_errors(stderr: str) -> str:
    """Filter Docker stderr to show only real errors, not progress lines."""
    if not stderr:
        return ""

    progress_keywords = [
        'Pulling', 'Download', 'Extracting', 'Pull complete',
        'Waiting', 'Verifying', 'Already exists', 'Digest:',
        'Status:', 'Image is up to date', 'Downloaded newer image',
        'Container', 'Network', 'Pulled', 'Running', 'Started', 'Stopped',
        'Removed', 'Created',
    ]

    error_lines = []
    for line in stderr.split('\n'):
        if any(keyword in line for keyword in progress_keywords):
            continue
        if line.strip():
            error_lines.append(line)

    return '\n'.join(error_lines)
