import sys

from cli.ui import setup_logging


if __name__ == "__main__":
    setup_logging()

    # Installer mode: python main.py setup [options]
    if len(sys.argv) >= 2 and sys.argv[1] == 'setup':
        from cli.setup_menu import run_setup
        sys.exit(run_setup(sys.argv[2:]))

    # Everything else is a management verb: python main.py <command> [arg]
    from cli.manage import handle_command
    sys.exit(handle_command(sys.argv[1:]))
