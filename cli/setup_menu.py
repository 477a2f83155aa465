# TRAEFIK-STACK v1.0
import sys

from rich.table import Table

from cli.ui import (
    confirm, console, setup_logging, show_error, show_header, show_info,
    show_result_panel, show_success, show_warning
)
from config import MANAGE_SCRIPT_NAME, SCRIPTS_DIR_NAME, get_project_root, load_config
from proxy.installer import TraefikInstaller
from utils.errors import ExternalToolError, StackError, parse_docker_error
from utils.network import dashboard_urls

MANAGE_SCRIPT = f"{SCRIPTS_DIR_NAME}/{MANAGE_SCRIPT_NAME}"

SETUP_USAGE = """Usage: setup [options]

Options:
  --yes, -y            Overwrite an existing docker-compose.yml without asking
  --skip-docker        Do not check or install Docker / Docker Compose
  --configure          Prompt for the HTTP and dashboard ports
  --project-root PATH  Project directory (default: $TRAEFIK_STACK_ROOT or cwd)
  --help, -h           Show this help message
"""


def parse_setup_args(argv):
    '''Minimal option parser; returns a dict or raises ValueError'''
    options = {'yes': False, 'skip_docker': False, 'configure': False,
               'project_root': None, 'help': False}
    args = list(argv)
    while args:
        arg = args.pop(0)
        if arg in ('--yes', '-y'):
            options['yes'] = True
        elif arg == '--skip-docker':
            options['skip_docker'] = True
        elif arg == '--configure':
            options['configure'] = True
        elif arg in ('--help', '-h', 'help'):
            options['help'] = True
        elif arg == '--project-root':
            if not args:
                raise ValueError("--project-root needs a path")
            options['project_root'] = args.pop(0)
        else:
            raise ValueError(f"Unknown option: {arg}")
    return options


def show_requirements_table(status):
    '''Print the dependency check as a table'''
    table = Table(title="📋 Requirements Status", show_header=True, header_style="bold cyan")
    table.add_column("Requirement", style="cyan", width=25)
    table.add_column("Status", style="white", width=40)

    if status['docker']:
        table.add_row("Docker", "✅ Installed and running" if status['docker_running']
                      else "⚠️  Installed but not running")
        table.add_row("Start on boot", "✅ Enabled" if status['enabled'] else "⚠️  Disabled")
    else:
        table.add_row("Docker", "❌ Not installed")
    table.add_row("Docker Compose", "✅ Installed" if status['compose'] else "❌ Not installed")

    console.print()
    console.print(table)
    console.print()


def show_next_steps(config, manage_script):
    urls = dashboard_urls(config)
    show_result_panel(
        "Next steps:\n"
        "1. Start Traefik:\n"
        f"   {manage_script} start\n\n"
        "2. Access Traefik Dashboard:\n"
        f"   {urls[0]}\n"
        f"   Or: {urls[1]}\n\n"
        "3. Configure services to use Traefik:\n"
        "   Add labels to your service containers to enable Traefik routing\n\n"
        f"Management commands ({manage_script} <command>):\n"
        "start, stop, restart, logs, status, update, backup,\n"
        "restore <file>, shell, dashboard, help",
        title="Traefik setup completed!"
    )


def run_setup(argv):
    '''Setup entry point; returns the process exit code'''
    try:
        options = parse_setup_args(argv)
    except ValueError as e:
        show_error(str(e))
        print(SETUP_USAGE)
        return 1

    if options['help']:
        print(SETUP_USAGE)
        return 0

    try:
        project_root = get_project_root(options['project_root'])
        config = load_config(project_root)

        show_header()
        show_info("Starting Traefik setup...")
        show_success(f"Project root: {project_root}")

        installer = TraefikInstaller(project_root, config)

        if not options['skip_docker']:
            show_requirements_table(installer.check_dependencies())
            installer.ensure_dependencies()
            if installer.verify_installation():
                show_success("Docker and Docker Compose are ready")
            else:
                show_warning("Docker could not be verified; continuing with file generation")

        if options['configure']:
            config = installer.get_configuration()

        result = installer.install(config, confirm=confirm, assume_yes=options['yes'])
        if not result.compose_written:
            return 0

        show_next_steps(config, MANAGE_SCRIPT)
        return 0

    except ExternalToolError as e:
        show_error(str(e))
        detail = parse_docker_error(e.stderr)
        if detail:
            show_warning(detail)
        return e.exit_code
    except StackError as e:
        show_error(str(e))
        return e.exit_code
    except KeyboardInterrupt:
        show_warning("Setup interrupted")
        return 130


def main():
    setup_logging()
    sys.exit(run_setup(sys.argv[1:]))
