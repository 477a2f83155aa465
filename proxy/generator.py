# TRAEFIK-STACK v1.0
import logging
import shutil
from datetime import datetime
from pathlib import Path

from config import (
    BACKUP_DIR_NAME, COMPOSE_FILE_NAME, CONFIG_DIR_NAME, DATA_DIR_NAME, MANAGE_SCRIPT_NAME,
    SCRIPTS_DIR_NAME
)
from proxy.templates import (
    render_compose, render_dynamic_config, render_gitignore, render_manage_script,
    render_traefik_config
)

_log = logging.getLogger(__name__)

LAYOUT_DIRS = (DATA_DIR_NAME, CONFIG_DIR_NAME, SCRIPTS_DIR_NAME, BACKUP_DIR_NAME)
DIR_MODE = 0o755
SCRIPT_MODE = 0o755


class GenerationPlan:
    '''Everything setup would write, computed without touching the disk.

    `files` maps paths that are always (re)written to their content. The
    compose descriptor is kept apart because overwriting it needs consent.
    '''

    def __init__(self, project_root, config):
        self.project_root = Path(project_root)
        self.config = config
        self.directories = [self.project_root / d for d in LAYOUT_DIRS]
        self.files = {
            self.project_root / CONFIG_DIR_NAME / 'traefik.yml': render_traefik_config(config),
            self.project_root / CONFIG_DIR_NAME / 'dynamic.yml': render_dynamic_config(config),
            self.project_root / '.gitignore': render_gitignore(config),
        }
        self.manage_script = self.project_root / SCRIPTS_DIR_NAME / MANAGE_SCRIPT_NAME
        self.files[self.manage_script] = render_manage_script(config, self.project_root.absolute())
        self.compose_path = self.project_root / COMPOSE_FILE_NAME
        self.compose_content = render_compose(config)

        self.compose_exists = self.compose_path.is_file()
        self.compose_changed = True
        if self.compose_exists:
            # Bytes, so a hand-edited descriptor in any encoding can be compared
            current = self.compose_path.read_bytes()
            self.compose_changed = current != self.compose_content.encode('utf-8')

    @property
    def needs_confirmation(self):
        '''An existing descriptor is only replaced after explicit consent'''
        return self.compose_exists


class GenerationResult:
    def __init__(self):
        self.created_dirs = []
        self.written_files = []
        self.compose_written = False
        self.compose_backup = None


def plan_generation(project_root, config):
    return GenerationPlan(project_root, config)


def backup_path_for(compose_path, now=None):
    '''docker-compose.yml.backup.YYYYmmdd-HHMMSS, never reusing an existing name'''
    stamp = (now or datetime.now()).strftime('%Y%m%d-%H%M%S')
    candidate = compose_path.with_name(f"{compose_path.name}.backup.{stamp}")
    counter = 1
    while candidate.exists():
        candidate = compose_path.with_name(f"{compose_path.name}.backup.{stamp}-{counter}")
        counter += 1
    return candidate


def _write(path, content):
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content)
    _log.debug("wrote %s (%d bytes)", path, len(content))


def apply_generation(plan, overwrite_compose=False):
    '''Write the planned bundle.

    Directories and the static config files are always (re)written. An
    existing compose descriptor is replaced only when overwrite_compose is
    true, after copying it aside. There is no rollback: every write is
    idempotent and running setup again repairs a half-written tree.
    '''
    result = GenerationResult()

    for directory in plan.directories:
        if not directory.is_dir():
            result.created_dirs.append(directory)
        directory.mkdir(parents=True, exist_ok=True)

    for path, content in plan.files.items():
        _write(path, content)
        result.written_files.append(path)

    for name in (CONFIG_DIR_NAME, DATA_DIR_NAME):
        (plan.project_root / name).chmod(DIR_MODE)
    plan.manage_script.chmod(SCRIPT_MODE)

    if plan.compose_exists:
        if not overwrite_compose:
            _log.info("keeping existing %s", plan.compose_path)
            return result
        result.compose_backup = backup_path_for(plan.compose_path)
        shutil.copy2(plan.compose_path, result.compose_backup)
        _log.info("backed up %s to %s", plan.compose_path, result.compose_backup)

    _write(plan.compose_path, plan.compose_content)
    result.compose_written = True
    return result
