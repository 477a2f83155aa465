# TRAEFIK-STACK v1.0
import logging

from audit import AuditEventType, AuditLogger
from config import validate_config
from proxy.generator import apply_generation, plan_generation
from proxy.installer_base import BaseInstaller
from utils import system
from utils.docker_utils import get_docker_compose_command

_log = logging.getLogger(__name__)


class TraefikInstaller(BaseInstaller):
    '''Installs Docker if needed and writes the Traefik configuration bundle'''

    def check_dependencies(self):
        '''Report what is present: docker, docker running, compose, enabled at boot'''
        docker = system.check_docker()
        status = {
            'docker': docker['installed'],
            'docker_running': docker['running'],
            'compose': False,
            'enabled': False,
        }
        if docker['installed']:
            status['compose'] = get_docker_compose_command() is not None
            status['enabled'] = system.is_docker_enabled()
        return status

    def ensure_dependencies(self):
        '''Install whatever check_dependencies reports missing'''
        from cli.ui import show_success, show_warning

        status = self.check_dependencies()

        if not status['docker']:
            show_warning("Docker not found. Installing Docker...")
            system.install_docker_linux()
        else:
            show_success("Docker is already installed.")
            if not status['enabled']:
                system.enable_docker_service(start=False)

        # A fresh docker-ce install may already ship the compose plugin
        if get_docker_compose_command() is None:
            show_warning("Docker Compose not found. Installing Docker Compose...")
            system.install_compose_plugin()
        else:
            show_success("Docker Compose is already installed.")

    def get_configuration(self):
        '''Ask for the host ports, keeping the loaded settings as defaults'''
        from cli.ui import show_error, show_step_detail, show_step_line, step_input
        from utils.validation import validate_port

        config = dict(self.config)

        show_step_line()
        show_step_detail("Traefik configuration")
        show_step_line()

        for key, label in (('http_port', 'HTTP port'), ('dashboard_port', 'Dashboard port')):
            while True:
                value = step_input(f"{label} [{config[key]}]: ").strip()
                if not value:
                    break
                try:
                    config[key] = validate_port(value)
                    break
                except ValueError as e:
                    show_error(str(e))

        return validate_config(config)

    def install(self, config, confirm=None, assume_yes=False):
        '''Plan the bundle, ask before replacing docker-compose.yml, then write.

        `confirm` is called with the question when consent is needed;
        assume_yes answers it without prompting.
        '''
        from cli.ui import show_info, show_success, show_warning

        plan = plan_generation(self.project_root, config)

        overwrite = True
        if plan.needs_confirmation:
            show_warning(f"Warning: {plan.compose_path.name} already exists!")
            show_warning("Running setup will OVERWRITE your existing configuration.")
            show_warning("Any customizations or comments will be lost.")
            if not plan.compose_changed:
                show_info("The generated file is identical to the current one.")
            if assume_yes:
                overwrite = True
            else:
                overwrite = bool(confirm and confirm("Do you want to continue and overwrite it?"))

        result = apply_generation(plan, overwrite_compose=overwrite)

        for path in result.written_files:
            show_success(f"Created {path.relative_to(plan.project_root)}")

        if result.compose_backup:
            show_success(f"Backup created: {result.compose_backup.name}")
        if result.compose_written:
            show_success(f"Created {plan.compose_path.name}")
        else:
            show_warning(f"Setup cancelled. Your existing {plan.compose_path.name} is unchanged.")

        AuditLogger(self.project_root, enabled=config['audit_log']).log_event(
            AuditEventType.CONFIG_CHANGE,
            config['container_name'],
            {
                'compose_written': result.compose_written,
                'compose_backup': result.compose_backup.name if result.compose_backup else None,
            }
        )
        _log.debug("generation finished: %s", vars(result))
        return result

    def verify_installation(self):
        status = self.check_dependencies()
        return status['docker'] and status['compose']
