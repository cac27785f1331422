# taskapi/logging_setup.py

import logging
import sys

_HANDLER_NAME = "taskapi-console"

# Third-party loggers that only reach the console at WARNING and above.
_QUIET_LOGGERS = ("sqlalchemy", "httpx", "httpcore", "multipart")


def setup_logging(level: str | int = logging.INFO) -> None:
    """Install one formatted stderr handler on the root logger.

    Safe to call more than once: the handler is only added the first time,
    later calls just adjust the level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
