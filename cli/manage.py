# TRAEFIK-STACK v1.0
import logging
import sys

from audit import AuditEventType, AuditLogger
from cli.ui import (
    confirm, console, setup_logging, show_error, show_info, show_success, show_url, show_warning
)
from config import get_project_root, load_config
from proxy.backup import create_backup, extract_backup, get_backup_dir, list_backups, plan_restore
from utils.docker_progress import filter_docker_errors, run_docker_with_progress
from utils.docker_utils import get_container_status, get_docker_compose_command, run_attached
from utils.errors import ExternalToolError, PreconditionError, StackError, check_result, parse_docker_error
from utils.network import dashboard_urls

_log = logging.getLogger(__name__)

USAGE = """Traefik Management Script

Usage: manage [options] [command]

Commands:
  start           Start Traefik
  stop            Stop Traefik
  restart         Restart Traefik
  logs            Show Traefik logs
  status          Show container status
  update          Update Traefik to latest version
  backup          Create a backup of configuration
  restore [file]  Restore configuration from backup
  shell           Access Traefik container shell
  dashboard       Show dashboard URL
  help            Show this help message

Options:
  --yes, -y            Answer yes to confirmation prompts
  --project-root PATH  Project directory (default: $TRAEFIK_STACK_ROOT or cwd)
"""

STATS_FORMAT = "table {{.Container}}\t{{.CPUPerc}}\t{{.MemUsage}}\t{{.NetIO}}\t{{.BlockIO}}"


def show_help():
    console.print(USAGE, highlight=False, markup=False)


class ManageContext:
    '''What every command needs: where the project lives, its settings,
    the audit trail and how to ask for confirmation.'''

    def __init__(self, project_root, config, confirm=confirm, assume_yes=False):
        self.project_root = project_root
        self.config = config
        self.confirm = confirm
        self.assume_yes = assume_yes
        self.audit = AuditLogger(project_root, enabled=config['audit_log'])
        self._compose = None

    @property
    def container_name(self):
        return self.config['container_name']

    def compose(self, *args):
        '''docker compose argv, resolving the compose flavour once'''
        if self._compose is None:
            self._compose = get_docker_compose_command() or ['docker', 'compose']
        return self._compose + list(args)

    def run(self, message, *args):
        '''Run a compose subcommand with a spinner; raise on failure'''
        command = self.compose(*args)
        result = run_docker_with_progress(command, message, cwd=str(self.project_root))
        return check_result(result, command)

    def run_attached(self, command):
        return run_attached(command, cwd=str(self.project_root))

    def ask(self, question):
        if self.assume_yes:
            return True
        return bool(self.confirm and self.confirm(question))


def _print_dashboard_urls(ctx):
    urls = dashboard_urls(ctx.config)
    show_info(f"Access dashboard at: {urls[0]}")
    show_info(f"Or: {urls[1]}")


def start_traefik(ctx):
    console.print("Starting Traefik...", style="yellow")
    ctx.run("Starting Traefik", 'up', '-d')
    show_success("Traefik started successfully!")
    _print_dashboard_urls(ctx)
    ctx.audit.log_event(AuditEventType.START, ctx.container_name)
    return 0


def stop_traefik(ctx):
    console.print("Stopping Traefik...", style="yellow")
    ctx.run("Stopping Traefik", 'down')
    show_success("Traefik stopped successfully!")
    ctx.audit.log_event(AuditEventType.STOP, ctx.container_name)
    return 0


def restart_traefik(ctx):
    console.print("Restarting Traefik...", style="yellow")
    ctx.run("Restarting Traefik", 'restart')
    show_success("Traefik restarted successfully!")
    ctx.audit.log_event(AuditEventType.RESTART, ctx.container_name)
    return 0


def show_logs(ctx):
    console.print("Showing Traefik logs (Ctrl+C to exit)...", style="yellow")
    try:
        return ctx.run_attached(ctx.compose('logs', '-f'))
    except KeyboardInterrupt:
        return 0


def show_status(ctx):
    console.print("Container Status:", style="yellow")
    returncode = ctx.run_attached(ctx.compose('ps'))
    if returncode != 0:
        return returncode

    console.print()
    console.print("System Resources:", style="yellow")
    state = get_container_status(ctx.container_name)
    if state != 'running':
        show_info(f"{ctx.container_name} is not running ({state})")
        return 0
    return ctx.run_attached(
        ['docker', 'stats', '--no-stream', '--format', STATS_FORMAT, ctx.container_name]
    )


def update_traefik(ctx):
    '''Pull then recreate. A failed pull raises before `up`, so the old
    containers keep running.'''
    console.print("Updating Traefik...", style="yellow")
    ctx.run("Pulling latest images", 'pull')
    ctx.run("Recreating containers", 'up', '-d')
    show_success("Traefik updated successfully!")
    ctx.audit.log_event(AuditEventType.UPDATE, ctx.container_name, {'image': ctx.config['image']})
    return 0


def backup_config(ctx):
    console.print("Creating backup...", style="yellow")
    backup_file = create_backup(ctx.project_root, ctx.config)
    show_success(f"Backup created: {backup_file}")
    ctx.audit.log_event(AuditEventType.BACKUP, ctx.container_name, {'file': backup_file.name})
    return 0


def commit_restore(ctx, plan):
    '''Destructive half of restore: stop, extract over the root, start'''
    stop_traefik(ctx)
    extract_backup(plan)
    start_traefik(ctx)
    show_success("Configuration restored successfully!")
    ctx.audit.log_event(AuditEventType.RESTORE, ctx.container_name, {'file': plan.archive.name})
    return 0


def restore_config(ctx, backup_file=None):
    if not backup_file:
        available = list_backups(ctx.project_root)
        if available:
            show_info(f"Available backups in {get_backup_dir(ctx.project_root)}:")
            for path in available:
                console.print(f"     {path.name}", highlight=False)
    plan = plan_restore(ctx.project_root, backup_file)

    console.print(f"Restoring configuration from {plan.archive}...", style="yellow")
    if plan.metadata.get('created'):
        show_info(f"Backup created: {plan.metadata['created']}")
    show_info(f"Contains: {', '.join(plan.roots)}")

    if not ctx.ask("This will overwrite current configuration. Continue?"):
        show_warning("Restore cancelled")
        return 0

    return commit_restore(ctx, plan)


def access_shell(ctx):
    console.print("Accessing Traefik container shell...", style="yellow")
    return ctx.run_attached(ctx.compose('exec', ctx.container_name, '/bin/sh'))


def show_dashboard(ctx):
    console.print("Traefik Dashboard URLs:", style="bold blue")
    for url in dashboard_urls(ctx.config):
        show_url(url)
    console.print()
    console.print("Note: Dashboard is currently insecure (HTTP only)", style="blue")
    console.print("This is expected for initial setup. HTTPS can be configured later.", style="blue")
    return 0


COMMANDS = {
    'start':     start_traefik,
    'stop':      stop_traefik,
    'restart':   restart_traefik,
    'logs':      show_logs,
    'status':    show_status,
    'update':    update_traefik,
    'backup':    backup_config,
    'restore':   restore_config,
    'shell':     access_shell,
    'dashboard': show_dashboard,
}

HELP_ALIASES = ('help', '--help', '-h')

# Verbs that take exactly one positional argument
ARGUMENT_COMMANDS = {'restore'}


def parse_args(argv):
    '''Split argv into (verb, args, options). Raises ValueError on bad options.'''
    options = {'yes': False, 'project_root': None}
    positionals = []
    args = list(argv)
    while args:
        arg = args.pop(0)
        if arg in ('--yes', '-y'):
            options['yes'] = True
        elif arg == '--project-root':
            if not args:
                raise ValueError("--project-root needs a path")
            options['project_root'] = args.pop(0)
        elif arg in HELP_ALIASES:
            positionals.append('help')
        elif arg.startswith('-') and len(arg) > 1:
            raise ValueError(f"Unknown option: {arg}")
        else:
            positionals.append(arg)

    verb = positionals[0] if positionals else None
    return verb, positionals[1:], options


def handle_command(argv, confirm=confirm):
    '''Dispatch one verb; returns the exit code'''
    try:
        verb, args, options = parse_args(argv)
    except ValueError as e:
        show_error(str(e))
        show_help()
        return 1

    if verb == 'help':
        show_help()
        return 0

    if verb not in COMMANDS:
        show_error(f"Unknown command: {verb}" if verb else "No command given")
        show_help()
        return 1

    try:
        if verb in ARGUMENT_COMMANDS:
            if len(args) > 1:
                raise PreconditionError(f"'{verb}' takes a single argument")
        elif args:
            raise PreconditionError(f"'{verb}' takes no arguments")

        project_root = get_project_root(options['project_root'])
        config = load_config(project_root)
        ctx = ManageContext(project_root, config, confirm=confirm, assume_yes=options['yes'])
        _log.debug("running %s in %s", verb, project_root)
        return COMMANDS[verb](ctx, *args)

    except PreconditionError as e:
        show_error(str(e))
        if verb == 'restore':
            console.print("Usage: manage restore /path/to/backup.tar.gz", highlight=False)
        return e.exit_code
    except ExternalToolError as e:
        show_error(str(e))
        detail = parse_docker_error(filter_docker_errors(e.stderr))
        if detail:
            show_warning(detail)
        return e.exit_code
    except StackError as e:
        show_error(str(e))
        return e.exit_code


def main():
    setup_logging()
    sys.exit(handle_command(sys.argv[1:]))
