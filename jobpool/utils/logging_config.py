from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "[%(levelname)s] %(name)s - %(message)s"


def resolve_level(level: Union[str, int]) -> int:
    """Translate a level name such as ``"debug"`` into its numeric value."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown logging level: {level}")
    return value


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[str] = None,
    force: bool = False,
) -> int:
    """
    Configure root logging for jobpool entry points.

    The library modules only create loggers; this is meant for scripts such
    as the demo harness.

    Parameters
    ----------
    level:
        Logging level name (e.g., "INFO", "DEBUG") or numeric level.
    log_file:
        Optional path to log output. When not provided, logs go to stderr,
        which interleaves with terminal status lines.
    force:
        Replace handlers installed by an earlier call.

    Returns
    -------
    The numeric level that was applied.
    """

    logging_level = resolve_level(level)
    handler: logging.Handler
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logging.basicConfig(level=logging_level, handlers=[handler], force=force)
    return logging_level
