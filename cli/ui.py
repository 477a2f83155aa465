import logging
import os
import sys

import inquirer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.text import Text

console = Console()
err_console = Console(stderr=True)


def setup_logging(level=None):
    '''Route library logging through rich; level from TRAEFIK_STACK_LOG_LEVEL'''
    level = (level or os.environ.get('TRAEFIK_STACK_LOG_LEVEL') or 'WARNING').upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def show_success(message):
    '''Show success message in green'''
    console.print(f"  ✅ {message}", style="bold green")

def show_error(message):
    '''Show error message in red'''
    err_console.print(f"  ❌ {message}", style="bold red")

def show_warning(message):
    '''Show warning message in yellow'''
    console.print(f"  ⚠️  {message}", style="yellow")

def show_info(message):
    '''Show info message in blue'''
    console.print(f"  ℹ️  {message}", style="bold blue")

def show_url(url):
    console.print(f"     {url}", style="yellow")

def _header():
    logo = Text()
    logo.append("  traefik-stack", style="bold cyan")
    logo.append("  |  Traefik reverse proxy manager", style="dim")
    return logo

def show_header():
    console.print(Panel(_header(), border_style="cyan", padding=(0, 2)))

def show_step_detail(message):
    '''Show a detail line under a step, maintaining the vertical line'''
    console.print(f"  │     {message}", style="dim green")

def show_step_line():
    console.print(f"  │", style="dim cyan")

def step_input(prompt):
    '''Input with vertical line prefix for connected config flow'''
    console.print(f"  │", style="dim cyan", end="")
    return input(f"     {prompt}")

def show_result_panel(content, title="Success"):
    '''Show result info in a styled panel'''
    panel = Panel(
        content,
        title=f"[bold green]{title}[/bold green]",
        border_style="green",
        padding=(1, 2)
    )
    console.print()
    console.print(panel)

def confirm(message):
    '''Yes/no question that defaults to No.

    Anything but an explicit yes, an interrupted prompt, or a session
    without a terminal counts as No.
    '''
    if not sys.stdin.isatty():
        show_warning("No terminal available to confirm; treating as No (use --yes)")
        return False

    answer = inquirer.prompt([
        inquirer.Confirm('confirm', message=message, default=False)
    ])
    return bool(answer and answer.get('confirm'))
