import logging
import sys
from pathlib import Path
from typing import Optional, Union


class _ThirdPartyNoiseFilter(logging.Filter):
    """
    Keep our own logs and the server's access/error logs,
    but only let other libraries through at WARNING and above.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("actionable_inbox") or name.startswith("uvicorn"):
            return True
        # SQL echo is opted into explicitly via SQL_ECHO.
        if name.startswith("sqlalchemy.engine"):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(
    *,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """
    Configure the root logger with a stderr handler and, when `log_file`
    is given, a file handler receiving everything at DEBUG.

    Call this once, before the first log line is emitted.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch.addFilter(_ThirdPartyNoiseFilter())
    root.addHandler(ch)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)
