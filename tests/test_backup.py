import io
import tarfile
from datetime import datetime

import pytest

from proxy.backup import (
    create_backup, extract_backup, get_meta_path, list_backups, plan_restore, read_metadata
)
from utils.errors import PreconditionError


def _snapshot(root):
    return {
        p.relative_to(root): p.read_bytes()
        for name in ('config', 'data')
        for p in (root / name).rglob('*') if p.is_file()
    }


def _tar(path, entries):
    with tarfile.open(path, 'w:gz') as tar:
        for name, kind, payload in entries:
            info = tarfile.TarInfo(name)
            if kind == 'file':
                info.size = len(payload)
                tar.addfile(info, io.BytesIO(payload))
            elif kind == 'symlink':
                info.type = tarfile.SYMTYPE
                info.linkname = payload
                tar.addfile(info)
    return path


def test_create_backup(project, config):
    backup = create_backup(project, config, now=datetime(2024, 1, 2, 3, 4, 5))

    assert backup == project / 'backups' / 'traefik-config-20240102-030405.tar.gz'
    with tarfile.open(backup, 'r:gz') as tar:
        roots = {m.name.split('/')[0] for m in tar.getmembers()}
    assert roots == {'config', 'data'}

    meta = read_metadata(backup)
    assert meta['created'] == '2024-01-02 03:04:05'
    assert meta['container'] == 'traefik'
    assert meta['directories'] == ['config', 'data']
    assert get_meta_path(backup).name == 'traefik-config-20240102-030405.meta'


def test_backup_restore_round_trip(project, config):
    before = _snapshot(project)
    backup = create_backup(project, config)

    (project / 'config' / 'traefik.yml').write_text('changed\n')
    (project / 'data' / 'certs' / 'acme.json').unlink()

    extract_backup(plan_restore(project, backup))

    assert _snapshot(project) == before


def test_backup_requires_directories(tmp_path, config):
    (tmp_path / 'config').mkdir()
    with pytest.raises(PreconditionError):
        create_backup(tmp_path, config)
    assert not (tmp_path / 'backups').exists()


def test_list_backups_newest_first(project, config):
    old = create_backup(project, config, now=datetime(2023, 1, 1))
    new = create_backup(project, config, now=datetime(2024, 1, 1))
    assert list_backups(project) == [new, old]


@pytest.mark.parametrize('path', [None, ''])
def test_restore_needs_argument(project, path):
    with pytest.raises(PreconditionError, match='specify backup file'):
        plan_restore(project, path)


def test_restore_missing_file(project):
    with pytest.raises(PreconditionError, match='not found'):
        plan_restore(project, project / 'backups' / 'nope.tar.gz')


def test_restore_not_an_archive(project):
    bogus = project / 'backups' / 'bogus.tar.gz'
    bogus.write_text('not gzip')
    with pytest.raises(PreconditionError, match='Not a readable'):
        plan_restore(project, bogus)


@pytest.mark.parametrize('entries', [
    [('etc/passwd', 'file', b'root')],
    [('config/../../escape', 'file', b'x')],
    [('/config/traefik.yml', 'file', b'x')],
    [('data/link', 'symlink', '../../outside')],
    [('config/a.yml', 'file', b'x'), ('scripts/run.sh', 'file', b'x')],
])
def test_restore_refuses_foreign_archive(project, entries):
    archive = _tar(project / 'backups' / 'foreign.tar.gz', entries)
    before = _snapshot(project)

    with pytest.raises(PreconditionError, match='foreign archive'):
        plan_restore(project, archive)

    assert _snapshot(project) == before


def test_restore_plan(project, config):
    backup = create_backup(project, config)
    plan = plan_restore(project, backup)
    assert plan.roots == ['config', 'data']
    assert plan.metadata['image'] == 'traefik:v2.11'
