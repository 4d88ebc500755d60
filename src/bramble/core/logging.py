# src/bramble/core/logging.py
"""Logging setup for the runner and the CLI.

structlog events and plain ``logging`` records both end up in one stdlib
handler whose ``ProcessorFormatter`` renders them as console text or JSON
lines. A host test suite capturing stdlib logging therefore sees
``property_failed`` and friends exactly as ``bramble --json-logs`` prints them.

Nothing logged here is read back by generation or shrinking.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

# Raised to at least WARNING regardless of --verbose.
_NOISY_LOGGERS: tuple[str, ...] = ("asyncio",)


def _drop_formatter_keys(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Strip the ``_record``/``_from_structlog`` keys ProcessorFormatter injects."""
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def _pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]


def _render_chain(json_output: bool) -> list[Any]:
    if json_output:
        return [_drop_formatter_keys, structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [_drop_formatter_keys, structlog.dev.ConsoleRenderer(colors=False)]


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Install the bramble handler on the root logger.

    Args:
        json_output: Emit one JSON object per line instead of console text.
        level: Root level name (DEBUG shows every shrink step).
        stream: Where lines go; stderr when omitted, keeping stdout for reports.
    """
    log_level = getattr(logging, level.upper())
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfigured between CLI invocations; a cached logger would keep the old chain.
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr if stream is None else stream)
    handler.setFormatter(ProcessorFormatter(processors=_render_chain(json_output), foreign_pre_chain=pre_chain))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
