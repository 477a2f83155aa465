# TRAEFIK-STACK v1.0
'''Backup and restore of the config/ and data/ trees'''

import logging
import os
import tarfile
from datetime import datetime
from pathlib import Path

import yaml

from config import BACKUP_DIR_NAME, BACKUP_DIRS
from utils.errors import ArchiveError, PreconditionError
from utils.validation import validate_archive_member

_log = logging.getLogger(__name__)

BACKUP_PREFIX = 'traefik-config-'
BACKUP_SUFFIX = '.tar.gz'


def get_backup_dir(project_root):
    return Path(project_root) / BACKUP_DIR_NAME


def get_meta_path(backup_path: Path) -> Path:
    name = backup_path.name
    if name.endswith(BACKUP_SUFFIX):
        return backup_path.parent / f"{name[:-len(BACKUP_SUFFIX)]}.meta"
    return backup_path.with_suffix('.meta')


def _archive_name(now):
    return f"{BACKUP_PREFIX}{now.strftime('%Y%m%d-%H%M%S')}{BACKUP_SUFFIX}"


def create_metadata(backup_file, config, now):
    '''Write the YAML sidecar describing an archive'''
    meta = {
        'created': now.strftime('%Y-%m-%d %H:%M:%S'),
        'container': config['container_name'],
        'image': config['image'],
        'directories': list(BACKUP_DIRS),
        'size': backup_file.stat().st_size,
    }
    with open(get_meta_path(backup_file), 'w', encoding='utf-8') as f:
        yaml.safe_dump(meta, f, default_flow_style=False, sort_keys=False)


def read_metadata(backup_file):
    meta_path = get_meta_path(Path(backup_file))
    if not meta_path.exists():
        return {}
    try:
        with open(meta_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        _log.warning("ignoring unreadable metadata %s: %s", meta_path, e)
        return {}


def create_backup(project_root, config, now=None):
    '''Archive config/ and data/ into backups/traefik-config-<stamp>.tar.gz.

    Returns the archive path. A partial archive is removed on failure.
    '''
    project_root = Path(project_root)
    now = now or datetime.now()

    for name in BACKUP_DIRS:
        directory = project_root / name
        if not directory.is_dir():
            raise PreconditionError(f"Directory not found: {directory} (run setup first)")

    backup_dir = get_backup_dir(project_root)
    backup_dir.mkdir(parents=True, exist_ok=True)
    backup_file = backup_dir / _archive_name(now)

    try:
        with tarfile.open(backup_file, 'w:gz') as tar:
            for name in BACKUP_DIRS:
                tar.add(project_root / name, arcname=name)
    except (OSError, tarfile.TarError) as e:
        if backup_file.exists():
            backup_file.unlink()
        raise ArchiveError(f"Backup failed: {e}")

    create_metadata(backup_file, config, now)
    _log.info("created backup %s", backup_file)
    return backup_file


def list_backups(project_root):
    '''Backup archives, newest first'''
    backup_dir = get_backup_dir(project_root)
    if not backup_dir.is_dir():
        return []
    backups = [
        p for p in backup_dir.iterdir()
        if p.is_file() and p.name.endswith(BACKUP_SUFFIX)
    ]
    return sorted(backups, key=lambda p: p.name, reverse=True)


class RestorePlan:
    '''A validated archive ready to be extracted over the project root'''

    def __init__(self, project_root, archive, members):
        self.project_root = Path(project_root)
        self.archive = archive
        self.members = members
        self.roots = sorted({m.name.split('/', 1)[0] for m in members if m.name not in ('', '.')})
        self.metadata = read_metadata(archive)


def _check_member(member):
    validate_archive_member(member.name, BACKUP_DIRS)
    if member.isdev() or member.isfifo():
        raise ValueError(f"Special file in archive: {member.name}")
    if member.issym() or member.islnk():
        target = member.linkname
        if member.issym():
            target = os.path.normpath(os.path.join(os.path.dirname(member.name), target))
        validate_archive_member(target, BACKUP_DIRS)


def plan_restore(project_root, archive_path):
    '''Check a restore is possible without changing anything.

    Raises PreconditionError when the argument is missing, the file does not
    exist, is not a tar.gz, or holds anything outside config/ and data/.
    '''
    if not archive_path:
        raise PreconditionError("Please specify backup file to restore")

    # extractall(filter=...) needs 3.10.12 or 3.11.4+
    if not hasattr(tarfile, 'data_filter'):
        raise PreconditionError("This Python cannot extract archives safely; upgrade to 3.10.12 or later")

    archive = Path(archive_path).expanduser()
    if not archive.is_file():
        raise PreconditionError(f"Backup file not found: {archive_path}")

    try:
        with tarfile.open(archive, 'r:gz') as tar:
            members = tar.getmembers()
    except (OSError, tarfile.TarError) as e:
        raise PreconditionError(f"Not a readable tar.gz archive: {archive} ({e})")

    if not members:
        raise PreconditionError(f"Backup archive is empty: {archive}")

    for member in members:
        try:
            _check_member(member)
        except ValueError as e:
            raise PreconditionError(f"Refusing foreign archive {archive.name}: {e}")

    return RestorePlan(project_root, archive.resolve(), members)


def extract_backup(plan):
    '''Extract a planned archive over the project root'''
    try:
        with tarfile.open(plan.archive, 'r:gz') as tar:
            tar.extractall(plan.project_root, filter='data')
    except (OSError, tarfile.TarError) as e:
        raise ArchiveError(f"Restore failed while extracting {plan.archive.name}: {e}")
    _log.info("extracted %s into %s", plan.archive, plan.project_root)
