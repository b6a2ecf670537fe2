"""Snapshot of which ClusterCost releases are installed in the cluster."""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from .config import AGENT_RELEASE, DASHBOARD_RELEASE, DEFAULT_NAMESPACE
from .errors import CommandError
from .utils import run_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReleaseInfo:
    """A Helm release as reported by ``helm list``."""

    namespace: str
    revision: Optional[str] = None
    updated: Optional[str] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class InstallState:
    """Detected agent and dashboard releases (None when absent)."""

    agent: Optional[ReleaseInfo] = None
    dashboard: Optional[ReleaseInfo] = None


EMPTY_STATE = InstallState()


def find_release_info(releases: list[dict], release_name: str) -> Optional[ReleaseInfo]:
    """Pick a release out of ``helm list -o json`` output by name."""
    for release in releases:
        if release.get("name") == release_name:
            return ReleaseInfo(
                namespace=release.get("namespace"),
                revision=release.get("revision"),
                updated=release.get("updated"),
                status=release.get("status"),
            )
    return None


def parse_release_list(output: str) -> InstallState:
    """Build an InstallState from ``helm list -A -o json`` output.

    Raises:
        ValueError: The output is not a JSON list of objects
    """
    output = (output or "").strip()
    releases = json.loads(output) if output else []
    if not isinstance(releases, list):
        raise ValueError("Expected a JSON list of releases")
    if not all(isinstance(release, dict) for release in releases):
        raise ValueError("Expected every release to be a JSON object")
    return InstallState(
        agent=find_release_info(releases, AGENT_RELEASE),
        dashboard=find_release_info(releases, DASHBOARD_RELEASE),
    )


def detect_install_state(previous: InstallState = EMPTY_STATE) -> InstallState:
    """Query Helm for installed releases across all namespaces.

    Args:
        previous: Snapshot returned when Helm cannot be queried

    Returns:
        A fresh snapshot, or previous on failure
    """
    try:
        result = run_command("helm", ["list", "-A", "-o", "json"])
        return parse_release_list(result.stdout)
    except (CommandError, ValueError) as e:
        logger.debug(f"Could not detect install state: {e}")
        return previous


def has_existing_install(state: InstallState) -> bool:
    return bool(state.agent or state.dashboard)


def resolve_default_namespace(state: InstallState, fallback: str = DEFAULT_NAMESPACE) -> str:
    """Namespace of an existing install, falling back to the default."""
    if state.agent and state.agent.namespace:
        return state.agent.namespace
    if state.dashboard and state.dashboard.namespace:
        return state.dashboard.namespace
    return fallback
