# TRAEFIK-STACK v1.0
import os
from pathlib import Path

import yaml

from utils.errors import PreconditionError
from utils.validation import validate_container_name, validate_hostname, validate_image, validate_port

# Fixed layout, relative to the project root
CONFIG_DIR_NAME = 'config'
DATA_DIR_NAME = 'data'
SCRIPTS_DIR_NAME = 'scripts'
MANAGE_SCRIPT_NAME = 'manage.sh'
BACKUP_DIR_NAME = 'backups'
AUDIT_DIR_NAME = 'logs/audit'
COMPOSE_FILE_NAME = 'docker-compose.yml'
SETTINGS_FILE_NAME = 'traefik-stack.yml'

# Directories archived by `backup` and expected by `restore`
BACKUP_DIRS = (CONFIG_DIR_NAME, DATA_DIR_NAME)

DEFAULT_TIMEZONE = 'Europe/London'

DEFAULT_CONFIG = {
    'container_name': 'traefik',
    'image': 'traefik:v2.11',
    'network': 'traefik',
    'http_port': 80,
    'dashboard_port': 8080,
    'dashboard_host': 'traefik.localhost',
    'timezone': DEFAULT_TIMEZONE,
    'log_level': 'INFO',
    'audit_log': True,
}

# Environment variable -> config key
ENV_OVERRIDES = {
    'TZ': 'timezone',
    'TRAEFIK_HTTP_PORT': 'http_port',
    'TRAEFIK_DASHBOARD_PORT': 'dashboard_port',
    'TRAEFIK_IMAGE': 'image',
}

LOG_LEVELS = ('DEBUG', 'INFO', 'WARN', 'WARNING', 'ERROR', 'FATAL', 'PANIC')


def get_project_root(path=None):
    '''Resolve the project root: explicit path, $TRAEFIK_STACK_ROOT, or cwd'''
    if path:
        return Path(path).resolve()
    env_root = os.environ.get('TRAEFIK_STACK_ROOT')
    if env_root:
        return Path(env_root).resolve()
    return Path.cwd().resolve()


def get_default_config():
    '''Fresh copy of the built-in defaults'''
    return dict(DEFAULT_CONFIG)


def _read_settings_file(settings_file):
    try:
        with open(settings_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PreconditionError(f"Cannot parse {settings_file}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PreconditionError(f"{settings_file} must contain a mapping")

    unknown = sorted(set(data) - set(DEFAULT_CONFIG))
    if unknown:
        raise PreconditionError(f"Unknown settings in {settings_file}: {', '.join(unknown)}")

    return data


def validate_config(config):
    '''Validate and normalize a settings dict. Raises PreconditionError.'''
    try:
        config['container_name'] = validate_container_name(config['container_name'])
        config['network'] = validate_container_name(config['network'])
        config['image'] = validate_image(config['image'])
        config['http_port'] = validate_port(config['http_port'])
        config['dashboard_port'] = validate_port(config['dashboard_port'])
        config['dashboard_host'] = validate_hostname(config['dashboard_host'])
    except ValueError as e:
        raise PreconditionError(str(e))

    if config['http_port'] == config['dashboard_port']:
        raise PreconditionError("HTTP port and dashboard port must differ")

    timezone = str(config['timezone'] or '').strip()
    config['timezone'] = timezone or DEFAULT_TIMEZONE

    level = str(config['log_level']).upper()
    if level not in LOG_LEVELS:
        raise PreconditionError(f"Invalid log level: {config['log_level']}")
    config['log_level'] = level

    if isinstance(config['audit_log'], str):
        config['audit_log'] = config['audit_log'].strip().lower() in ('1', 'true', 'yes', 'on')
    else:
        config['audit_log'] = bool(config['audit_log'])

    return config


def load_config(project_root, environ=None):
    '''Build the settings dict: defaults < traefik-stack.yml < environment'''
    environ = os.environ if environ is None else environ
    config = get_default_config()

    settings_file = Path(project_root) / SETTINGS_FILE_NAME
    if settings_file.exists():
        config.update(_read_settings_file(settings_file))

    for env_name, key in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            config[key] = value

    return validate_config(config)
