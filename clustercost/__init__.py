"""ClusterCost installer - deploy the ClusterCost agent and dashboard with Helm."""

__version__ = "0.1.0"
