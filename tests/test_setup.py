import pytest

from cli.setup_menu import parse_setup_args, run_setup


@pytest.fixture
def no_prompt(monkeypatch):
    def fail(question):
        raise AssertionError(f"unexpected prompt: {question}")
    monkeypatch.setattr('cli.setup_menu.confirm', fail)


def test_parse_setup_args():
    options = parse_setup_args(['-y', '--skip-docker', '--project-root', '/srv/proxy'])
    assert options['yes'] and options['skip_docker']
    assert options['project_root'] == '/srv/proxy'
    with pytest.raises(ValueError):
        parse_setup_args(['--bogus'])


def test_help(capsys):
    assert run_setup(['--help']) == 0
    assert 'Usage: setup' in capsys.readouterr().out


def test_bad_option(tmp_path):
    assert run_setup(['--nope']) == 1


def test_fresh_setup(tmp_path, host_address, no_prompt, capsys):
    assert run_setup(['--skip-docker', '--project-root', str(tmp_path)]) == 0

    assert (tmp_path / 'docker-compose.yml').is_file()
    assert (tmp_path / 'config' / 'traefik.yml').is_file()
    assert f'http://{host_address}:8080' in capsys.readouterr().out


def test_setup_declined(tmp_path, host_address, monkeypatch):
    compose = tmp_path / 'docker-compose.yml'
    compose.write_text('custom\n')
    monkeypatch.setattr('cli.setup_menu.confirm', lambda question: False)

    assert run_setup(['--skip-docker', '--project-root', str(tmp_path)]) == 0

    assert compose.read_text() == 'custom\n'
    assert list(tmp_path.glob('docker-compose.yml.backup.*')) == []


def test_setup_yes(tmp_path, host_address, no_prompt):
    (tmp_path / 'docker-compose.yml').write_text('custom\n')

    assert run_setup(['-y', '--skip-docker', '--project-root', str(tmp_path)]) == 0

    backups = list(tmp_path.glob('docker-compose.yml.backup.*'))
    assert len(backups) == 1
    assert backups[0].read_text() == 'custom\n'


def test_setup_invalid_settings(tmp_path, no_prompt):
    (tmp_path / 'traefik-stack.yml').write_text('dashboard_port: nope\n')
    assert run_setup(['--skip-docker', '--project-root', str(tmp_path)]) == 1
    assert not (tmp_path / 'docker-compose.yml').exists()


def test_setup_installs_docker(tmp_path, docker, host_address, no_prompt, monkeypatch):
    from utils import system

    monkeypatch.setattr(system, 'is_root', lambda: True)
    monkeypatch.setattr(system, 'detect_os', lambda: ('debian', {'NAME': 'Debian GNU/Linux',
                                                               'VERSION_CODENAME': 'bookworm'}))
    monkeypatch.setenv('SUDO_USER', 'admin')
    docker.respond(['which', 'docker'], returncode=1)

    assert run_setup(['--project-root', str(tmp_path)]) == 0

    commands = docker.commands()
    assert ['apt-get', 'install', '-y', 'docker-ce', 'docker-ce-cli', 'containerd.io'] in commands
    assert (tmp_path / 'docker-compose.yml').is_file()


def test_setup_docker_install_failure(tmp_path, docker, no_prompt, monkeypatch):
    from utils import system

    monkeypatch.setattr(system, 'is_root', lambda: True)
    monkeypatch.setattr(system, 'detect_os', lambda: ('ubuntu', {'NAME': 'Ubuntu'}))
    docker.respond(['which', 'docker'], returncode=1)
    docker.respond(['apt-get', 'install'], returncode=100)

    assert run_setup(['--project-root', str(tmp_path)]) == 100
    assert not (tmp_path / 'docker-compose.yml').exists()


def test_setup_keeps_non_utf8_descriptor(tmp_path, host_address, monkeypatch):
    compose = tmp_path / 'docker-compose.yml'
    compose.write_bytes(b'# caf\xe9 proxy\nservices: {}\n')
    monkeypatch.setattr('cli.setup_menu.confirm', lambda question: False)

    assert run_setup(['--skip-docker', '--project-root', str(tmp_path)]) == 0

    assert compose.read_bytes() == b'# caf\xe9 proxy\nservices: {}\n'


def test_next_steps_point_at_manage_script(tmp_path, host_address, no_prompt, capsys):
    assert run_setup(['--skip-docker', '--project-root', str(tmp_path)]) == 0
    assert 'scripts/manage.sh start' in capsys.readouterr().out
