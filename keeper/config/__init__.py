"""Keeper settings and deployment tables."""

from .deployment import (
    DeploymentConfig,
    DeploymentConfigError,
    load_deployment,
    parse_deployment,
    validate_deployment,
)

__all__ = [
    "DeploymentConfig",
    "DeploymentConfigError",
    "load_deployment",
    "parse_deployment",
    "validate_deployment",
]
