"""Logging setup: structlog on top of stdlib handlers, with session-scoped context."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

from formphoto.settings import Settings, get_settings

if TYPE_CHECKING:
    import contextvars
    from collections.abc import Mapping
    from types import TracebackType

    from structlog.typing import EventDict, Processor

_LOGGING_CONFIGURED = False


def _rename_event_key(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Emit the log event under a `message` key."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _build_handlers(config: Settings) -> list[logging.Handler]:
    """Return stdlib handlers for stderr and the optional log file."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file, encoding="utf-8"))
    return handlers


def _build_processors(config: Settings) -> list[Processor]:
    """Return the structlog processor chain, ending with the configured renderer.

    Session context bound with `SessionLogContext` is merged first so every
    pipeline line carries the session token.
    """
    renderer: Any = structlog.processors.JSONRenderer() if config.log_json else structlog.dev.ConsoleRenderer()
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        _rename_event_key,
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(*, settings: Settings | None = None, force: bool = False) -> None:
    """Configure logging for the photo pipeline.

    Args:
        settings: Source of log level, renderer and file. Defaults to `get_settings()`.
        force: Replace an existing configuration.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603

    if _LOGGING_CONFIGURED and not force:
        return

    config = settings or get_settings()
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=_build_handlers(config),
        force=force,
    )
    structlog.configure(
        processors=_build_processors(config),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _LOGGING_CONFIGURED = True


def get_logger(name: str = "formphoto") -> structlog.BoundLogger:
    """Return a named logger; the first call configures logging from settings."""
    if not _LOGGING_CONFIGURED:
        configure_logging()
    return structlog.get_logger(name)


class SessionLogContext:
    """Bind a session token to every log line emitted inside a `with` block.

    On exit the previous value of the `session` key, if any, is restored.
    Exceptions leave the block untouched.
    """

    def __init__(self, token: str) -> None:
        self.token = token
        self._bound: Mapping[str, contextvars.Token[Any]] = {}

    def __enter__(self) -> SessionLogContext:
        self._bound = structlog.contextvars.bind_contextvars(session=self.token)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        structlog.contextvars.reset_contextvars(**self._bound)
        self._bound = {}
