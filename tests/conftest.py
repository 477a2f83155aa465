import subprocess

import pytest

from config import get_default_config, validate_config


class FakeDocker:
    '''Stands in for subprocess.run: records every command, answers from a
    table of (argv prefix -> returncode/stdout/stderr).'''

    def __init__(self):
        self.calls = []
        self.responses = []

    def respond(self, prefix, returncode=0, stdout='', stderr=''):
        self.responses.insert(0, (list(prefix), returncode, stdout, stderr))

    def __call__(self, command, *args, **kwargs):
        argv = command if isinstance(command, list) else [command]
        self.calls.append((list(argv), kwargs.get('cwd')))
        for prefix, returncode, stdout, stderr in self.responses:
            if argv[:len(prefix)] == prefix:
                return subprocess.CompletedProcess(argv, returncode, stdout, stderr)
        return subprocess.CompletedProcess(argv, 0, '', '')

    def commands(self):
        '''Recorded commands minus the compose flavour check'''
        return [argv for argv, _ in self.calls if argv[:3] != ['docker', 'compose', 'version']]

    def compose_calls(self):
        return [argv[2:] for argv in self.commands() if argv[:2] == ['docker', 'compose']]


@pytest.fixture
def docker(monkeypatch):
    fake = FakeDocker()
    monkeypatch.setattr(subprocess, 'run', fake)
    return fake


@pytest.fixture
def config():
    return validate_config(get_default_config())


@pytest.fixture
def project(tmp_path, monkeypatch):
    '''An initialized project root with some config and data content'''
    monkeypatch.delenv('TRAEFIK_STACK_ROOT', raising=False)
    for name in ('TZ', 'TRAEFIK_HTTP_PORT', 'TRAEFIK_DASHBOARD_PORT', 'TRAEFIK_IMAGE'):
        monkeypatch.delenv(name, raising=False)

    (tmp_path / 'config').mkdir()
    (tmp_path / 'config' / 'traefik.yml').write_text('api:\n  dashboard: true\n')
    (tmp_path / 'config' / 'dynamic.yml').write_text('# placeholder\n')
    (tmp_path / 'data' / 'certs').mkdir(parents=True)
    (tmp_path / 'data' / 'certs' / 'acme.json').write_bytes(b'{"le": {}}\x00\x01')
    (tmp_path / 'backups').mkdir()
    return tmp_path


@pytest.fixture
def host_address(monkeypatch):
    monkeypatch.setattr('utils.network.get_host_address', lambda: '192.168.1.20')
    return '192.168.1.20'
