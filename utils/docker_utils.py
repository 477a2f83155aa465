import logging
import subprocess

from utils.errors import ExternalToolError, exit_status

_log = logging.getLogger(__name__)


def get_docker_compose_command():
    """Get the correct docker compose command for the system"""

    try:
        # Try new format: docker compose (Docker 20.10+)
        result = subprocess.run(
            ['docker', 'compose', 'version'],
            capture_output=True,
            text=True
        )

        if result.returncode == 0:
            return ['docker', 'compose']
    except FileNotFoundError:
        pass

    try:
        # Fallback to old format: docker-compose (legacy)
        result = subprocess.run(
            ['docker-compose', '--version'],
            capture_output=True,
            text=True
        )

        if result.returncode == 0:
            return ['docker-compose']
    except FileNotFoundError:
        pass

    return None


def safe_docker_run(command, **kwargs):
    """Run a docker command safely - returns None if Docker is not installed."""
    try:
        return subprocess.run(command, **kwargs)
    except FileNotFoundError:
        return None


def run_attached(command, cwd=None):
    """Run a command wired to the terminal (logs, shell, tables).

    Output is not captured. Returns the exit status; a missing executable
    raises ExternalToolError(127).
    """
    _log.debug("running %s (cwd=%s)", command, cwd)
    try:
        result = subprocess.run(command, cwd=cwd)
    except FileNotFoundError as e:
        raise ExternalToolError(command, 127, str(e))
    _log.debug("%s exited with %s", command, result.returncode)
    if result.returncode < 0:
        return exit_status(result.returncode)
    return result.returncode


def get_container_status(container_name):
    '''Get container status (running, exited, ...) or "unknown"'''
    result = safe_docker_run(
        ['docker', 'inspect', container_name, '--format', '{{.State.Status}}'],
        capture_output=True,
        text=True
    )
    if result is None:
        return 'unknown'
    if result.returncode == 0:
        return result.stdout.strip()
    return 'unknown'
