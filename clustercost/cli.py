"""CLI interface for the ClusterCost installer."""

import logging
import sys
from typing import Callable

import click
from rich.markup import escape

from clustercost import __version__
from clustercost import flows
from clustercost.config import get_settings
from clustercost.errors import MissingDependencyError, OperationCancelledError, StepError
from clustercost.state import EMPTY_STATE, InstallState, detect_install_state
from clustercost.utils import (
    console,
    ensure_prerequisites,
    err_console,
    note,
    render_step_error,
    setup_logging,
)

logger = logging.getLogger(__name__)

Flow = Callable[[InstallState], InstallState]


def guarded(action: Callable[[], None]) -> None:
    """Run an action and turn installer errors into output and an exit code."""
    try:
        action()
    except OperationCancelledError:
        note("No changes were made.", "Action cancelled")
    except StepError as e:
        render_step_error(e)
        sys.exit(1)
    except MissingDependencyError:
        err_console.print("[red]Missing required dependencies.[/red]")
        sys.exit(1)
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        err_console.print(f"[red]{escape(str(e)) or 'Unexpected error'}[/red]")
        sys.exit(1)


def run_interactive(splash: bool) -> None:
    """Splash, prerequisite check, then the main menu loop."""
    if splash:
        flows.display_splash()
    ensure_prerequisites()
    state = detect_install_state(EMPTY_STATE)
    console.rule("[bright_cyan]ClusterCost control center[/bright_cyan]")
    flows.run_menu(state)
    console.print("\nStay cost-aware. 👋")


def run_single_flow(flow: Flow) -> None:
    ensure_prerequisites()
    flow(detect_install_state(EMPTY_STATE))


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log every kubectl and helm call")
@click.option(
    "--splash/--no-splash",
    default=None,
    help="Show the boot animation before the menu",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, splash: bool | None) -> None:
    """ClusterCost - install the ClusterCost agent and dashboard into Kubernetes.

    Run without a command to open the interactive control center.
    """
    settings = get_settings()
    setup_logging("DEBUG" if verbose else settings.log_level)

    if ctx.invoked_subcommand is None:
        show_splash = settings.splash if splash is None else splash
        guarded(lambda: run_interactive(show_splash))


@main.command()
def install() -> None:
    """Install or upgrade the agent and dashboard."""
    guarded(lambda: run_single_flow(flows.install_flow))


@main.command("port-forward")
def port_forward() -> None:
    """Port-forward the dashboard to a local port."""
    guarded(lambda: run_single_flow(flows.port_forward_flow))


@main.command()
def uninstall() -> None:
    """Remove the agent and dashboard releases."""
    guarded(lambda: run_single_flow(flows.uninstall_flow))


@main.command()
def debug() -> None:
    """Show cluster and Helm diagnostics."""
    guarded(lambda: run_single_flow(flows.debug_flow))


@main.command()
def about() -> None:
    """Explain what ClusterCost is."""
    flows.about_flow(EMPTY_STATE)


if __name__ == "__main__":
    main()
