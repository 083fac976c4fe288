"""structlog rendering for datekit's stdlib loggers.

The library itself only logs through ``logging.getLogger(__name__)``
(DST disambiguation decisions and search diagnostics, all at DEBUG).
``configure_logging`` is what the CLI calls at start-up to render those
records on stderr, either for people or as JSON lines.
"""

from __future__ import annotations

import logging
import sys

import structlog

_PACKAGE_LOGGER = "datekit"


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Route log records to stderr through a structlog ``ProcessorFormatter``.

    Args:
        verbose: Show datekit's DEBUG records. When False, only WARNING+.
        log_json: Render JSON lines instead of console output.

    Calling it again replaces the previous handler.
    """
    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(_PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
