"""Singleton logging configuration.

setup_logging() configures the root logger once per process. Later calls
are no-ops, except that an explicit ``force=True`` re-applies the level
(used by ``--verbose`` after the CLI has already set up defaults).
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Third-party loggers to keep at WARNING
_SUPPRESSED_LOGGERS = ("pydantic", "pydantic_settings")

_configured = False


def setup_logging(level: str = "INFO", *, force: bool = False) -> None:
    """Configure the root logger to write to stderr.

    Idempotent: a second call is a no-op unless ``force`` is set.
    """
    global _configured  # noqa: PLW0603
    if _configured and not force:
        return
    _configured = True

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stderr,
        force=force,
    )

    for name in _SUPPRESSED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
