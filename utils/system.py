# TRAEFIK-STACK v1.0
import getpass
import os
import shlex
import subprocess
from pathlib import Path

from cli.ui import show_info, show_success, show_warning
from utils.docker_progress import run_command_with_progress
from utils.errors import PreconditionError, check_result

OS_RELEASE = Path('/etc/os-release')
DOCKER_KEYRING = '/usr/share/keyrings/docker-archive-keyring.gpg'
DOCKER_SOURCES_LIST = '/etc/apt/sources.list.d/docker.list'
APT_PREREQUISITES = ['apt-transport-https', 'ca-certificates', 'curl', 'gnupg', 'lsb-release']
DOCKER_PACKAGES = ['docker-ce', 'docker-ce-cli', 'containerd.io']
# Seconds to wait for `docker version` before treating the daemon as down
CHECK_TIMEOUT = 10


def is_root():
    return hasattr(os, 'geteuid') and os.geteuid() == 0


def privileged(command):
    '''Prefix a command with sudo unless already running as root'''
    return list(command) if is_root() else ['sudo'] + list(command)


def parse_os_release(text):
    '''KEY=value lines of /etc/os-release into a dict'''
    info = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, value = line.split('=', 1)
        try:
            parts = shlex.split(value)
        except ValueError:
            parts = [value.strip('"\'')]
        info[key] = parts[0] if parts else ''
    return info


def detect_os(os_release=OS_RELEASE):
    '''Detect the distribution family: ubuntu, debian, or other.

    Raspberry Pi OS reports itself as Debian-like and uses the Debian
    repository. Returns (family, info) or raises PreconditionError when
    the OS cannot be identified.
    '''
    try:
        info = parse_os_release(Path(os_release).read_text(encoding='utf-8', errors='replace'))
    except OSError:
        raise PreconditionError("Could not detect OS type. Please install Docker manually.")

    name = info.get('NAME', '')
    if 'Ubuntu' in name:
        return 'ubuntu', info
    if 'Raspberry Pi' in name or 'Debian' in name:
        return 'debian', info
    return 'other', info


def check_command_exists(command):
    '''Check if command exists on PATH'''
    try:
        result = subprocess.run(
            ['which', command],
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='ignore'
        )
        return result.returncode == 0
    except OSError:
        return False


def check_docker():
    '''Check if Docker is installed and running'''
    if not check_command_exists('docker'):
        return {'installed': False, 'running': False}

    try:
        result = subprocess.run(
            ['docker', 'version'],
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='ignore',
            timeout=CHECK_TIMEOUT
        )
    except subprocess.TimeoutExpired:
        return {'installed': True, 'running': False}
    return {'installed': True, 'running': result.returncode == 0}


def is_docker_enabled():
    '''True if systemd starts Docker at boot; False without systemd'''
    try:
        result = subprocess.run(
            ['systemctl', 'is-enabled', 'docker'],
            capture_output=True,
            text=True
        )
    except FileNotFoundError:
        return False
    return result.returncode == 0


def enable_docker_service(start=True):
    '''Enable Docker at boot and optionally start it now'''
    if not check_command_exists('systemctl'):
        show_warning("systemctl not found; enable and start Docker with your init system")
        return
    show_info("Enabling Docker to start on boot...")
    check_result(subprocess.run(privileged(['systemctl', 'enable', 'docker']),
                                capture_output=True, text=True))
    if start:
        check_result(subprocess.run(privileged(['systemctl', 'start', 'docker']),
                                    capture_output=True, text=True))


def _apt(*args, message):
    return check_result(run_command_with_progress(privileged(['apt-get'] + list(args)), message))


def _dpkg_architecture():
    result = check_result(subprocess.run(['dpkg', '--print-architecture'],
                                         capture_output=True, text=True))
    return result.stdout.strip()


def _release_codename(info):
    codename = info.get('VERSION_CODENAME')
    if codename:
        return codename
    result = check_result(subprocess.run(['lsb_release', '-cs'], capture_output=True, text=True))
    return result.stdout.strip()


def add_docker_repository(family, info):
    '''Add Docker's apt repository for ubuntu or debian'''
    base_url = f"https://download.docker.com/linux/{family}"

    # URL is fixed, so the pipe through a shell carries no injection risk
    gpg_cmd = (
        f"curl -fsSL {base_url}/gpg | "
        f"{'' if is_root() else 'sudo '}gpg --batch --yes --dearmor -o {DOCKER_KEYRING}"
    )
    check_result(
        run_command_with_progress(gpg_cmd, "Adding Docker's official GPG key", shell=True),
        ['sh', '-c', gpg_cmd]
    )

    source = (
        f"deb [arch={_dpkg_architecture()} signed-by={DOCKER_KEYRING}] "
        f"{base_url} {_release_codename(info)} stable\n"
    )
    check_result(subprocess.run(
        privileged(['tee', DOCKER_SOURCES_LIST]),
        input=source,
        capture_output=True,
        text=True
    ))


def install_docker_convenience_script():
    '''Fallback for unknown distributions: get.docker.com'''
    show_warning("Unknown OS type. Attempting to install Docker using get.docker.com script...")
    cmd = f"curl -fsSL https://get.docker.com | {'' if is_root() else 'sudo '}sh"
    check_result(
        run_command_with_progress(cmd, "Downloading and installing Docker (this may take a few minutes)", shell=True),
        ['sh', '-c', cmd]
    )


def _group_exists(name):
    try:
        return subprocess.run(['getent', 'group', name], capture_output=True).returncode == 0
    except FileNotFoundError:
        return False


def ensure_docker_group(user=None):
    '''Create the docker group if needed and add the user to it'''
    user = user or os.environ.get('SUDO_USER') or getpass.getuser()

    if not _group_exists('docker'):
        check_result(subprocess.run(privileged(['groupadd', 'docker']), capture_output=True, text=True))

    if user and user != 'root':
        check_result(subprocess.run(privileged(['usermod', '-aG', 'docker', user]),
                                    capture_output=True, text=True))
    return user


def install_docker_linux():
    '''Install Docker Engine following the host's distribution'''
    family, info = detect_os()
    show_info(f"Detected {info.get('NAME', family)}")

    _apt('update', message="Updating package lists")
    _apt('install', '-y', *APT_PREREQUISITES, message="Installing prerequisites")

    if family in ('ubuntu', 'debian'):
        show_info(f"Installing Docker using the {family.capitalize()} repository...")
        add_docker_repository(family, info)
        _apt('update', message="Updating package lists")
        _apt('install', '-y', *DOCKER_PACKAGES, message="Installing Docker Engine")
    else:
        install_docker_convenience_script()

    user = ensure_docker_group()
    enable_docker_service(start=True)

    show_success("Docker installed successfully.")
    if user and user != 'root':
        show_warning(f"Log out and back in so '{user}' picks up the docker group.")


def install_compose_plugin():
    '''Install the docker compose v2 plugin from apt'''
    _apt('update', message="Updating package lists")
    _apt('install', '-y', 'docker-compose-plugin', message="Installing Docker Compose plugin")
    show_success("Docker Compose installed successfully.")
