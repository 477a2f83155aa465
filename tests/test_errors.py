import subprocess

import pytest

from utils.errors import ExternalToolError, check_result, exit_status, parse_docker_error
from utils.docker_progress import filter_docker_errors


def test_check_result():
    ok = subprocess.CompletedProcess(['docker', 'ps'], 0, '', '')
    assert check_result(ok) is ok

    failed = subprocess.CompletedProcess(['docker', 'pull', 'x'], 3, '', 'boom')
    with pytest.raises(ExternalToolError) as exc:
        check_result(failed)
    assert exc.value.exit_code == 3
    assert exc.value.command == ['docker', 'pull', 'x']
    assert exc.value.stderr == 'boom'


def test_signal_exit_status():
    killed = subprocess.CompletedProcess(['docker', 'compose', 'up'], -15, '', '')
    with pytest.raises(ExternalToolError) as exc:
        check_result(killed)
    assert exc.value.exit_code == 143
    assert exit_status(-9) == 137
    assert exit_status(2) == 2


@pytest.mark.parametrize('stderr,expected', [
    ('Bind for 0.0.0.0:80 failed: port is already allocated', 'Port 0.0.0.0:80 is already in use'),
    ('Cannot connect to the Docker daemon at unix:///var/run/docker.sock', 'Docker is not running'),
    ('manifest unknown: manifest unknown', 'Docker image not found'),
    ('permission denied while trying to connect', 'Permission denied'),
    ('something odd\nreal last line', 'real last line'),
    ('', ''),
])
def test_parse_docker_error(stderr, expected):
    assert parse_docker_error(stderr).startswith(expected)


def test_filter_docker_errors():
    stderr = (
        " Container traefik  Stopping\n"
        "Pulling fs layer\n"
        "Error response from daemon: conflict\n"
    )
    assert filter_docker_errors(stderr) == 'Error response from daemon: conflict'
