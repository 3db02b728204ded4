"""
Remote data gateway access.

Provides the abstract gateway interface used by the cascade controller and its
HTTP implementation.
"""

from .base import RunGateway
from .client import (
    DEFAULT_NAMESPACE,
    EXPERIMENTS_PATH,
    METRIC_HISTORIES_PATH,
    RUN_SEARCH_PATH,
    GatewayClient,
)

__all__ = [
    "DEFAULT_NAMESPACE",
    "EXPERIMENTS_PATH",
    "METRIC_HISTORIES_PATH",
    "RUN_SEARCH_PATH",
    "GatewayClient",
    "RunGateway",
]
