# TRAEFIK-STACK v1.0
import re


class StackError(Exception):
    '''Base class for every error the tooling reports to the user'''

    exit_code = 1


class PreconditionError(StackError):
    '''Raised before any side effect: bad argument, missing file, invalid setting'''


def exit_status(returncode):
    '''Shell-style exit status: 128+N for a process killed by signal N'''
    if returncode < 0:
        return 128 - returncode
    return returncode or 1


class ExternalToolError(StackError):
    '''An external command (docker, tar, apt-get...) exited non-zero.

    The exit status of the tool is kept as-is and becomes the exit status of
    the management command.
    '''

    def __init__(self, command, returncode, stderr=''):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr or ''
        self.exit_code = exit_status(returncode)
        super().__init__(f"{' '.join(self.command)} exited with status {returncode}")


def check_result(result, command=None):
    '''Raise ExternalToolError if a CompletedProcess failed, else return it'''
    if result.returncode != 0:
        raise ExternalToolError(
            command or result.args,
            result.returncode,
            result.stderr if isinstance(result.stderr, str) else ''
        )
    return result


def parse_docker_error(stderr):
    """Parse Docker stderr into a short, readable error message."""
    text = (stderr or '').strip()
    if not text:
        return ''
    lower = text.lower()

    if 'port is already allocated' in lower or 'address already in use' in lower:
        m = re.search(r'(\d+\.\d+\.\d+\.\d+:\d+)', text)
        port = m.group(1) if m else 'unknown'
        return f'Port {port} is already in use. Change the port in traefik-stack.yml.'

    if 'is the docker daemon running' in lower or 'cannot connect' in lower:
        return 'Docker is not running. Start Docker first.'

    if 'no such image' in lower or 'manifest unknown' in lower:
        return 'Docker image not found. Check the image tag and your internet connection.'

    if 'no such service' in lower or 'is not running' in lower:
        return 'The Traefik container is not running. Start it first.'

    if 'permission denied' in lower:
        return 'Permission denied. Run with sudo or join the docker group.'

    if 'no space left' in lower:
        return 'No disk space left. Free up space and try again.'

    # Fallback: last meaningful line
    for line in reversed(text.splitlines()):
        line = line.strip()
        if line and not line.startswith(('time=', ' ', '|')):
            return line[:200]

    return 'Unknown error. Check Docker logs for details.'


class ArchiveError(StackError):
    '''Reading or writing a backup archive failed (I/O, corrupt gzip...)'''
