"""Structured logging package."""

from moneyapp.observability.logger import ActivityLogger, configure_logging

__all__ = ["ActivityLogger", "configure_logging"]
