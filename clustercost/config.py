"""Configuration constants and settings for the ClusterCost installer."""

from functools import lru_cache

from pydantic_settings import BaseSettings

# Default values
DEFAULT_NAMESPACE = "clustercost"

# Helm repository
HELM_REPO_NAME = "clustercost"
HELM_REPO_URL = "https://charts.clustercost.com"

# Releases and charts
AGENT_RELEASE = "clustercost-agent"
AGENT_CHART = "clustercost/clustercost-agent-k8s"
DASHBOARD_RELEASE = "clustercost-dashboard"
DASHBOARD_CHART = "clustercost/clustercost-dashboard"

# Dashboard service
DASHBOARD_SERVICE = "clustercost-dashboard"
DASHBOARD_TARGET_PORT = 9090
DASHBOARD_LOCAL_PORT = 3000

# The agent chart names its service "<release>-<chart name>"
AGENT_SERVICE_HOST = f"{AGENT_RELEASE}-{AGENT_CHART.split('/')[1]}"
AGENT_SERVICE_PORT = 8080

# Required binaries with install hints
PREREQUISITES = {
    "kubectl": "kubectl not found. Please install kubectl and configure your cluster context.",
    "helm": "Helm CLI not found. Please install Helm: https://helm.sh/docs/intro/install/",
}

DOCS_URL = "https://clustercost.com/docs/introduction/welcome/"

# Timeouts (seconds)
TIMEOUT_COMMAND = 300


class Settings(BaseSettings):
    """Installer settings, overridable through the environment."""

    # Install target
    namespace: str = DEFAULT_NAMESPACE
    helm_repo_url: str = HELM_REPO_URL
    local_port: int = DASHBOARD_LOCAL_PORT

    # Reject names that are not valid DNS-1123 labels
    strict_names: bool = False

    # Process settings
    command_timeout: int = TIMEOUT_COMMAND

    # Show the boot animation before the menu
    splash: bool = True

    # Logging
    log_level: str = "WARNING"

    class Config:
        """Pydantic config."""

        env_prefix = "CLUSTERCOST_"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
