"""Interactive flows behind each menu entry.

Each flow receives the current InstallState and returns the state the menu
should continue with. Flows that change releases re-detect the state.
"""

import time

from rich.markup import escape

from . import cluster, helm, prompts
from .config import (
    AGENT_RELEASE,
    DASHBOARD_RELEASE,
    DEFAULT_NAMESPACE,
    DOCS_URL,
    get_settings,
)
from .state import (
    InstallState,
    detect_install_state,
    has_existing_install,
    resolve_default_namespace,
)
from .utils import console, log_header, log_subheader, note, safe_command_output

SPLASH_FRAMES = [" " * i + "✦" + " " * (8 - i) for i in range(9)]


def default_namespace(state: InstallState) -> str:
    return resolve_default_namespace(state, fallback=get_settings().namespace)


def build_menu_options(state: InstallState) -> list[tuple[str, str]]:
    """Menu entries as (label, value) pairs for the current install state."""
    if not has_existing_install(state):
        return [
            ("Install ClusterCost (agent + dashboard)", "install"),
            ("What is ClusterCost?", "about"),
            ("Exit", "exit"),
        ]

    namespace = resolve_default_namespace(state)
    port_forward_label = (
        f"Launch dashboard (port-forward · ns: {namespace})"
        if namespace
        else "Launch dashboard (port-forward)"
    )
    return [
        (port_forward_label, "port-forward"),
        ("Upgrade ClusterCost (agent + dashboard)", "install"),
        ("Uninstall ClusterCost", "uninstall"),
        ("Show debug info", "debug"),
        ("What is ClusterCost?", "about"),
        ("Exit", "exit"),
    ]


def initial_menu_value(state: InstallState, options: list[tuple[str, str]]) -> str:
    """Preselect port-forward when installed, install otherwise."""
    preferred = "port-forward" if has_existing_install(state) else "install"
    values = [value for _, value in options]
    if preferred in values:
        return preferred
    return values[0] if values else "install"


def display_splash() -> None:
    console.print()
    with console.status("", spinner="dots") as status:
        for frame in SPLASH_FRAMES:
            status.update(f"[bright_magenta]Booting ClusterCost[/bright_magenta] {frame}")
            time.sleep(0.07)
    console.print()
    console.print("[bold #4FC3F7]ClusterCost[/bold #4FC3F7]")
    console.print("[bright_black]Know what your clusters really cost.[/bright_black]\n")
    console.print("[dim]Use arrow keys to navigate. Press Enter to select.[/dim]\n")


def prompt_for_context_selection(current: str) -> str:
    """Show the available contexts and ask which one to install into."""
    contexts = cluster.list_contexts()

    log_subheader("\nAvailable Kubernetes contexts:")
    for ctx in contexts:
        if ctx == current:
            console.print(f" [cyan]•[/cyan] [cyan]{escape(ctx)}[/cyan]")
        else:
            console.print(f" [bright_black]•[/bright_black] {escape(ctx)}")
    console.print()

    options = [(f"{ctx} (current)" if ctx == current else ctx, ctx) for ctx in contexts]
    initial = current if current in contexts else contexts[0]
    return prompts.ask_select("Choose a Kubernetes context for installation", options, default=initial)


def ensure_fresh_install_allowed(namespace: str) -> bool:
    """Ask before upgrading releases that already exist in the namespace.

    Returns:
        True when the install should go ahead
    """
    agent_exists = helm.helm_release_exists(AGENT_RELEASE, namespace)
    dashboard_exists = helm.helm_release_exists(DASHBOARD_RELEASE, namespace)

    if not agent_exists and not dashboard_exists:
        return True

    installed = [name for name, exists in (("agent", agent_exists), ("dashboard", dashboard_exists)) if exists]
    message = (
        f"ClusterCost {' + '.join(installed)} already detected in {namespace}. "
        "Reinstall and upgrade the existing release?"
    )
    if not prompts.ask_confirm(message, default=True):
        note("Reinstall cancelled; existing deployment left untouched.", "Existing install")
        return False

    note(
        f"Proceeding with reinstall in [cyan]{escape(namespace)}[/cyan]. "
        "Helm will upgrade the current release in place.",
        "Reinstall confirmed",
    )
    return True


def display_install_summary(namespace: str) -> None:
    console.print("\n[bright_green]✔ ClusterCost installation complete![/bright_green]")
    console.print(f"[bright_black]Namespace:[/bright_black] ns: [cyan]{escape(namespace)}[/cyan]")
    console.print(f"[bright_black]Agent release:[/bright_black] {AGENT_RELEASE}")
    console.print(f"[bright_black]Dashboard release:[/bright_black] {DASHBOARD_RELEASE}")
    console.print(
        "[bright_black]\nNext steps: select \"Launch dashboard (port-forward)\" "
        "from the main menu to launch the UI.\n[/bright_black]"
    )


def install_flow(state: InstallState) -> InstallState:
    """Install or upgrade the agent and dashboard."""
    context = cluster.current_context()

    if not has_existing_install(state):
        confirmed = prompts.ask_confirm(
            f"We detected Kubernetes context: {context}. Install ClusterCost here?",
            default=True,
        )
        if not confirmed:
            selected = prompt_for_context_selection(context)
            if selected != context:
                cluster.switch_context(selected)
            note(f"Using context [cyan]{escape(selected)}[/cyan]", "Context selected")

    namespace = prompts.ask_namespace("Namespace to install into", default_namespace(state))

    if not ensure_fresh_install_allowed(namespace):
        return state

    if not cluster.namespace_exists(namespace):
        cluster.create_namespace(namespace)

    helm.prepare_helm_repository()
    helm.deploy_agent(namespace)
    helm.deploy_dashboard(namespace)
    display_install_summary(namespace)
    return detect_install_state(state)


def port_forward_flow(state: InstallState) -> InstallState:
    """Tunnel a local port to the dashboard service."""
    namespace = prompts.ask_namespace("Namespace containing the dashboard", default_namespace(state))
    service = prompts.ask_service_name()
    local_port = prompts.ask_port("Local port to bind", get_settings().local_port)

    cluster.establish_port_forward(namespace, service, local_port)
    return state


def uninstall_flow(state: InstallState) -> InstallState:
    """Remove both releases after confirmation."""
    namespace = prompts.ask_namespace("Namespace where ClusterCost is installed", default_namespace(state))

    if not prompts.ask_confirm(f"Remove ClusterCost agent and dashboard from {namespace}?", default=False):
        note("ClusterCost removal cancelled.", "Cancelled")
        return state

    helm.uninstall_release(AGENT_RELEASE, namespace, "ClusterCost agent")
    helm.uninstall_release(DASHBOARD_RELEASE, namespace, "ClusterCost dashboard")

    console.print("\n[bright_green]✔ ClusterCost removed.[/bright_green]")
    console.print(
        "[bright_black]You can reinstall anytime via "
        "\"Install ClusterCost (agent + dashboard)\".\n[/bright_black]"
    )
    return detect_install_state(state)


def debug_flow(state: InstallState) -> InstallState:
    """Print cluster and Helm diagnostics."""
    log_header("Debug info")

    context = safe_command_output("kubectl", ["config", "current-context"])
    console.print(f"[cyan]Context:[/cyan] {context or 'n/a'}")

    namespaces = safe_command_output("kubectl", ["get", "ns"])
    console.print(f"\n[cyan]Namespaces:[/cyan]\n{namespaces or 'n/a'}")

    helm_version = safe_command_output("helm", ["version"])
    console.print(f"\n[cyan]Helm version:[/cyan] {helm_version or 'n/a'}")

    releases = safe_command_output("helm", ["list", "-n", DEFAULT_NAMESPACE])
    console.print(f"\n[cyan]Helm releases ({DEFAULT_NAMESPACE}):[/cyan]\n{releases or 'n/a'}\n")
    return state


def about_flow(state: InstallState) -> InstallState:
    log_subheader("\n• What is ClusterCost?")
    console.print(
        "ClusterCost is a lightweight Kubernetes add-on composed of two pieces: an agent "
        "that scrapes cluster cost signals and a dashboard that presents live spend, "
        "efficiency, and savings insights."
    )
    console.print(
        "\nIn the open-source distribution, all metrics stay inside your cluster. Nothing is "
        "shipped to our cloud; you remain in full control of data residency."
    )
    console.print(f"\nDocs: [cyan]{DOCS_URL}[/cyan] (installation, architecture, and roadmap).\n")
    return state


FLOWS = {
    "install": install_flow,
    "port-forward": port_forward_flow,
    "uninstall": uninstall_flow,
    "debug": debug_flow,
    "about": about_flow,
}


def run_menu(state: InstallState) -> InstallState:
    """Loop over the main menu until the user exits."""
    while True:
        options = build_menu_options(state)
        choice = prompts.ask_select(
            "What would you like to do?",
            options,
            default=initial_menu_value(state, options),
        )
        flow = FLOWS.get(choice)
        if flow is None:
            return state
        state = flow(state)
