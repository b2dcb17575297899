"""
Activity Logger

DESIGN DECISION: Components receive an ActivityLogger through their
constructor instead of calling global logging helpers. This keeps the
observability sink swappable (tests capture it, the app configures it
once) and avoids ambient global state.

The logger:
- Writes ActivityEvents and ad-hoc messages through structlog
- Binds the user identifier and custom values as context on every
  subsequent record
- Never receives tokens, passwords or Authorization headers
"""

import logging
from typing import Any, Optional

import structlog

from moneyapp.config.settings import AppSettings
from moneyapp.models.activity import ActivityEvent, ActivitySeverity


def configure_logging(settings: Optional[AppSettings] = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Called once by the composition root. Importing this module has no
    side effects.
    """
    settings = settings or AppSettings()

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, settings.effective_log_level),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class ActivityLogger:
    """
    Central observability interface.

    One instance is shared by all components of an app; each component
    passes its feature area as ``category``.
    """

    def __init__(self, logger: Optional[Any] = None, name: str = "moneyapp"):
        """
        Args:
            logger: A structlog (bound) logger. Defaults to
                    ``structlog.get_logger(name)``.
            name: Logger name used when no logger is supplied.
        """
        self._logger = logger if logger is not None else structlog.get_logger(name)

    def log(self, event: ActivityEvent) -> None:
        """Log an activity event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity == ActivitySeverity.ERROR:
            self._logger.error("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.WARNING:
            self._logger.warning("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.DEBUG:
            self._logger.debug("activity_event", **log_dict)
        else:
            self._logger.info("activity_event", **log_dict)

    def log_info(self, message: str, category: str = "General", **details: Any) -> None:
        self._logger.info(message, category=category, **details)

    def log_warning(self, message: str, category: str = "General", **details: Any) -> None:
        self._logger.warning(message, category=category, **details)

    def log_debug(self, message: str, category: str = "General", **details: Any) -> None:
        self._logger.debug(message, category=category, **details)

    def log_error(self, error: BaseException, category: str = "General", **details: Any) -> None:
        """
        Log an error.

        The user-facing message is logged next to the exception type so
        log readers see exactly what the user was shown.
        """
        self._logger.error(
            "error",
            category=category,
            error_type=type(error).__name__,
            error=str(error),
            user_message=getattr(error, "user_message", None),
            **details,
        )

    def log_user_action(self, action: str, parameters: Optional[dict[str, Any]] = None) -> None:
        self._logger.info(
            "user_action",
            category="UserAction",
            action=action,
            parameters=parameters or {},
        )

    def set_user_identifier(self, user_id: str) -> None:
        """Attach the user id to every following record."""
        self._logger = self._logger.bind(user_id=user_id)
        self._logger.info("user_identifier_set", category="Auth")

    def clear_user_identifier(self) -> None:
        self._logger = self._logger.try_unbind("user_id")

    def set_custom_value(self, key: str, value: Any) -> None:
        """Attach an arbitrary key/value to every following record."""
        self._logger = self._logger.bind(**{key: value})
