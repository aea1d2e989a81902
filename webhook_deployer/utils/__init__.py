"""Utility functions for Webhook Deployer."""

from webhook_deployer.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
