"""Webhook Deployer - push-triggered update-and-restart for configured projects."""

__version__ = "0.1.0"
