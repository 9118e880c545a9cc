import logging
import os
from pathlib import Path
from typing import Optional

LOG_FORMAT = "[%(levelname)s] %(threadName)s %(name)s - %(message)s"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure process logging for scripts built on taskbarrier.

    The package only creates module loggers and never configures handlers on
    import; call this from an entry point to see dispatch and failure logs.
    Thread names are included since entries log from worker threads.

    Parameters
    ----------
    level:
        Logging level name (e.g., "INFO", "DEBUG"). Defaults to
        ``TASKBARRIER_LOG_LEVEL`` or ``INFO``.
    log_file:
        Optional path to log output. When not provided, logs go to stderr.
    """

    level_name = level or os.getenv("TASKBARRIER_LOG_LEVEL", "INFO")
    handler_kwargs = {
        "level": getattr(logging, level_name.upper(), logging.INFO),
        "format": LOG_FORMAT,
    }

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handler_kwargs["filename"] = log_file

    logging.basicConfig(**handler_kwargs)
    # urllib3 logs every pooled connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(logging.WARNING, handler_kwargs["level"]))
