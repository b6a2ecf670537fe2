"""Helm chart deployment for ClusterCost."""

import json
import logging

from .config import (
    AGENT_CHART,
    AGENT_RELEASE,
    AGENT_SERVICE_HOST,
    AGENT_SERVICE_PORT,
    DASHBOARD_CHART,
    DASHBOARD_RELEASE,
    DEFAULT_NAMESPACE,
    HELM_REPO_NAME,
    get_settings,
)
from .errors import CommandError
from .utils import log, run_command, run_step

logger = logging.getLogger(__name__)


def build_agent_base_url(namespace: str) -> str:
    """In-cluster URL of the agent service in a namespace."""
    return f"http://{AGENT_SERVICE_HOST}.{namespace}.svc.cluster.local:{AGENT_SERVICE_PORT}"


def build_agent_helm_args(namespace: str) -> list[str]:
    """Arguments for ``helm`` that install or upgrade the agent."""
    return [
        "upgrade",
        "--install",
        AGENT_RELEASE,
        AGENT_CHART,
        "-n",
        namespace,
        "--create-namespace",
    ]


def build_dashboard_helm_args(namespace: str) -> list[str]:
    """Arguments for ``helm`` that install or upgrade the dashboard.

    The dashboard chart points at the agent in the default namespace. Any
    other namespace gets an explicit agent URL override.

    Args:
        namespace: Target namespace, already validated by the caller

    Returns:
        Argument list to pass after the ``helm`` binary
    """
    args = [
        "upgrade",
        "--install",
        DASHBOARD_RELEASE,
        DASHBOARD_CHART,
        "-n",
        namespace,
    ]

    if namespace != DEFAULT_NAMESPACE:
        args.extend(["--set-string", f"agents[0].baseUrl={build_agent_base_url(namespace)}"])

    return args


def helm_repo_exists(name: str = HELM_REPO_NAME) -> bool:
    """Check if a Helm repository is configured.

    Args:
        name: Repository name

    Returns:
        True if the repository is listed by ``helm repo list``
    """
    try:
        result = run_command("helm", ["repo", "list", "-o", "json"])
    except CommandError:
        # helm exits non-zero when no repositories are configured
        return False

    if not result.stdout:
        return False

    try:
        repositories = json.loads(result.stdout)
    except json.JSONDecodeError:
        logger.debug("Unreadable output from helm repo list")
        return False

    return isinstance(repositories, list) and any(
        repo.get("name") == name for repo in repositories if isinstance(repo, dict)
    )


def prepare_helm_repository() -> None:
    """Add the ClusterCost repository if needed, then refresh all repositories."""
    if not helm_repo_exists(HELM_REPO_NAME):
        repo_url = get_settings().helm_repo_url
        run_step(
            "Adding ClusterCost Helm repository",
            lambda: run_command("helm", ["repo", "add", HELM_REPO_NAME, repo_url]),
            "ClusterCost Helm repository added",
        )
    else:
        log("Helm repository already configured.", "skip")

    run_step(
        "Updating Helm repositories",
        lambda: run_command("helm", ["repo", "update"]),
        "Helm repositories updated",
    )


def helm_release_exists(release: str, namespace: str) -> bool:
    """Check if a Helm release is installed in a namespace."""
    try:
        run_command("helm", ["status", release, "-n", namespace])
        return True
    except CommandError:
        return False


def deploy_agent(namespace: str) -> None:
    timeout = get_settings().command_timeout
    run_step(
        "Deploying ClusterCost agent",
        lambda: run_command("helm", build_agent_helm_args(namespace), timeout=timeout),
        "ClusterCost agent deployed",
    )


def deploy_dashboard(namespace: str) -> None:
    timeout = get_settings().command_timeout
    run_step(
        "Deploying ClusterCost dashboard",
        lambda: run_command("helm", build_dashboard_helm_args(namespace), timeout=timeout),
        "ClusterCost dashboard deployed",
    )


def uninstall_release(release: str, namespace: str, label: str) -> bool:
    """Uninstall a Helm release if present.

    Args:
        release: Release name
        namespace: Kubernetes namespace
        label: Human-readable name for output

    Returns:
        True if the release was removed, False if it was not installed
    """
    if not helm_release_exists(release, namespace):
        log(f"{label} not found in {namespace}, skipping.", "skip")
        return False

    run_step(
        f"Uninstalling {label}",
        lambda: run_command("helm", ["uninstall", release, "-n", namespace]),
        f"{label} removed",
    )
    return True
