import logging
import sys
from typing import Optional, Union
from pixstack.kernel.system.config import APP_CONFIG

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_ROOT = "pixstack"


def setup_logging(level: Optional[Union[int, str]] = None, stream: Optional[object] = None) -> None:
    """
    Configures the package logger once. Safe to call repeatedly.
    Without `level`, PIXSTACK_LOG_LEVEL decides.
    """
    root = logging.getLogger(_ROOT)
    root.setLevel(level if level is not None else APP_CONFIG.log_level)
    if not root.handlers:
        handler = logging.StreamHandler(stream or sys.stderr)  # type: ignore[arg-type]
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
