"""Kubernetes cluster operations for the ClusterCost installer."""

import logging
import subprocess
import sys
import threading
from typing import IO

from .config import DASHBOARD_TARGET_PORT
from .errors import CommandError, StepError
from .utils import console, format_command, log, run_command, run_step

logger = logging.getLogger(__name__)

PORT_FORWARD_STEP = "Open dashboard port-forward"


def _echo_stream(stream: IO[str], sink: IO[str], captured: list[str]) -> None:
    for line in stream:
        captured.append(line)
        sink.write(line)
        sink.flush()


def current_context() -> str:
    """Return the active kubectl context.

    Raises:
        StepError: kubectl could not report a context
    """
    try:
        result = run_command("kubectl", ["config", "current-context"])
    except CommandError as e:
        raise StepError("Detect current Kubernetes context", e) from e
    return result.stdout or "unknown"


def list_contexts() -> list[str]:
    """Return every context name in the kubeconfig.

    Raises:
        StepError: kubectl failed or returned no contexts
    """
    try:
        result = run_command("kubectl", ["config", "get-contexts", "-o", "name"])
    except CommandError as e:
        raise StepError("List Kubernetes contexts", e) from e

    contexts = [line.strip() for line in result.stdout.splitlines() if line.strip()]
    if not contexts:
        raise StepError("List Kubernetes contexts", Exception("No Kubernetes contexts found."))
    return contexts


def switch_context(name: str) -> None:
    run_step(
        f"Switching kubectl context to {name}",
        lambda: run_command("kubectl", ["config", "use-context", name]),
        f"kubectl context set to {name}",
    )


def namespace_exists(namespace: str) -> bool:
    try:
        run_command("kubectl", ["get", "namespace", namespace])
        return True
    except CommandError:
        return False


def create_namespace(namespace: str) -> None:
    run_step(
        f"Creating namespace {namespace}",
        lambda: run_command("kubectl", ["create", "namespace", namespace]),
        f"Namespace {namespace} created",
    )


def build_port_forward_args(namespace: str, service: str, local_port: int) -> list[str]:
    """Arguments for ``kubectl`` that tunnel a local port to the dashboard."""
    return [
        "port-forward",
        "-n",
        namespace,
        f"svc/{service}",
        f"{local_port}:{DASHBOARD_TARGET_PORT}",
    ]


def establish_port_forward(namespace: str, service: str, local_port: int) -> None:
    """Port-forward the dashboard service and block until it stops.

    kubectl output is echoed as it arrives, stdout to stdout and stderr to
    stderr. Ctrl+C ends the tunnel.

    Args:
        namespace: Namespace containing the dashboard
        service: Dashboard service name
        local_port: Local port to bind

    Raises:
        StepError: kubectl could not start, exited before the tunnel was up,
            or exited with an error afterwards
    """
    args = build_port_forward_args(namespace, service, local_port)
    command = format_command("kubectl", args)
    logger.debug(f"Running: {command}")

    status = console.status("Establishing port-forward...")
    status.start()
    try:
        proc = subprocess.Popen(
            ["kubectl", *args],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        status.stop()
        log("Failed to establish port-forward", "error")
        raise StepError(PORT_FORWARD_STEP, CommandError(command, stderr=str(e))) from e

    connected = False
    output: list[str] = []
    errors: list[str] = []
    stderr_reader = threading.Thread(
        target=_echo_stream, args=(proc.stderr, sys.stderr, errors), daemon=True
    )
    stderr_reader.start()
    try:
        for line in proc.stdout:
            output.append(line)
            if not connected and "forwarding from" in line.lower():
                connected = True
                status.stop()
                log("Dashboard tunnel established", "success")
                console.print(f"[green]Dashboard available at http://localhost:{local_port}[/green]")
                console.print("[dim]Press Ctrl+C to stop the port-forward.[/dim]\n")
            sys.stdout.write(line)
            sys.stdout.flush()
        code = proc.wait()
        stderr_reader.join()
    except KeyboardInterrupt:
        proc.terminate()
        proc.wait()
        status.stop()
        console.print("\n[yellow]Port-forward stopped[/yellow]")
        return
    finally:
        status.stop()

    captured = "".join(errors).strip() or "".join(output).strip()
    if not connected:
        log("Failed to establish port-forward", "error")
        raise StepError(
            PORT_FORWARD_STEP,
            CommandError(command, code=code, stderr=captured, message="kubectl port-forward exited early"),
        )
    if code != 0:
        raise StepError(
            PORT_FORWARD_STEP,
            CommandError(
                command, code=code, stderr=captured, message="kubectl port-forward exited unexpectedly"
            ),
        )
