# TRAEFIK-STACK v1.0
'''Pure renderers for the configuration bundle.

Every function takes the settings dict from config.load_config() and returns
file content as text. Nothing here touches the filesystem.
'''

import shlex

import yaml

# Container-side ports, fixed by the Traefik image layout
CONTAINER_HTTP_PORT = 80
CONTAINER_DASHBOARD_PORT = 8080

TRAEFIK_CONFIG_PATH = '/etc/traefik/traefik.yml'
DYNAMIC_CONFIG_PATH = '/etc/traefik/dynamic.yml'
DOCKER_SOCKET = '/var/run/docker.sock'


def _dump(data):
    return yaml.dump(data, default_flow_style=False, sort_keys=False)


def build_traefik_config(config):
    '''Static Traefik configuration as a dict'''
    return {
        'api': {
            'dashboard': True,
            'insecure': True,
        },
        'ping': {},
        'entryPoints': {
            'web': {
                'address': f':{CONTAINER_HTTP_PORT}',
            },
        },
        'providers': {
            'docker': {
                'endpoint': f'unix://{DOCKER_SOCKET}',
                'exposedByDefault': False,
                'network': config['network'],
            },
            'file': {
                'filename': DYNAMIC_CONFIG_PATH,
                'watch': True,
            },
        },
        'log': {
            'level': config['log_level'],
        },
        'accessLog': {},
        'global': {
            'checkNewVersion': True,
            'sendAnonymousUsage': False,
        },
    }


def render_traefik_config(config):
    header = (
        "# Traefik configuration file\n"
        "# HTTP-only configuration (Let's Encrypt can be added later)\n"
        "# Generated by traefik-stack - edit traefik-stack.yml and re-run setup\n\n"
    )
    return header + _dump(build_traefik_config(config))


def render_dynamic_config(config):
    '''Dynamic configuration: placeholders only, no active rules'''
    return """# Dynamic configuration for Traefik
# This file can be modified without restarting Traefik

# HTTP to HTTPS redirect (uncomment when Let's Encrypt is configured)
# http:
#   middlewares:
#     redirect-to-https:
#       redirectScheme:
#         scheme: https
#         permanent: true

# TLS configuration (uncomment when Let's Encrypt is configured)
# tls:
#   options:
#     default:
#       sslProtocols:
#         - "TLSv1.2"
#         - "TLSv1.3"
"""


def build_compose(config):
    '''docker-compose.yml as a dict'''
    name = config['container_name']
    network = config['network']

    return {
        'version': '3.8',
        'services': {
            name: {
                'container_name': name,
                'image': config['image'],
                'restart': 'unless-stopped',
                'security_opt': ['no-new-privileges:true'],
                'ports': [
                    f"{config['http_port']}:{CONTAINER_HTTP_PORT}",
                    f"{config['dashboard_port']}:{CONTAINER_DASHBOARD_PORT}",
                ],
                'volumes': [
                    f'{DOCKER_SOCKET}:{DOCKER_SOCKET}:ro',
                    f'./config/traefik.yml:{TRAEFIK_CONFIG_PATH}:ro',
                    f'./config/dynamic.yml:{DYNAMIC_CONFIG_PATH}:ro',
                    './data:/data',
                ],
                'environment': [
                    f"TZ={config['timezone']}",
                ],
                'networks': [network],
                'labels': [
                    'traefik.enable=true',
                    f"traefik.http.routers.{name}.rule=Host(`{config['dashboard_host']}`)",
                    f'traefik.http.routers.{name}.entrypoints=web',
                    f'traefik.http.services.{name}.loadbalancer.server.port={CONTAINER_DASHBOARD_PORT}',
                ],
                'healthcheck': {
                    'test': [
                        'CMD', 'wget', '--no-verbose', '--tries=1', '--spider',
                        f'http://localhost:{CONTAINER_DASHBOARD_PORT}/ping',
                    ],
                    'interval': '30s',
                    'timeout': '10s',
                    'retries': 3,
                    'start_period': '40s',
                },
            },
        },
        'networks': {
            network: {
                'name': network,
                'driver': 'bridge',
            },
        },
    }


def render_compose(config):
    return _dump(build_compose(config))


GITIGNORE = """# Traefik data
data/

# Temporary files
*.tmp
*.log
.DS_Store
Thumbs.db

# Docker
.docker/

# Backups (optional - you might want to keep these)
backups/

# Audit trail and other logs
logs/

# IDE files
.vscode/
.idea/
*.swp
*.swo
*~

# Configuration backups
*.backup.*
"""


def render_gitignore(config):
    return GITIGNORE


MANAGE_SCRIPT = """#!/bin/sh
# TRAEFIK-STACK v1.0
# Traefik management wrapper, bound to the project it was generated in
exec traefik-manage --project-root {root} "$@"
"""


def render_manage_script(config, project_root):
    '''scripts/manage.sh: runs traefik-manage against this project from any directory'''
    return MANAGE_SCRIPT.format(root=shlex.quote(str(project_root)))
