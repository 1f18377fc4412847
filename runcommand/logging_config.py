"""
Logging configuration for the service and the uvicorn server.

Orchestrators poll GET /ready every few seconds; those access lines are
dropped so that the command's relayed output stays readable.
"""

import logging
from typing import Any, Dict, Iterable, Optional

QUIET_PATHS = ("/ready",)

# Loggers configured with the service level: name -> handler
_LOGGER_HANDLERS = {
    "uvicorn": "default",
    "uvicorn.error": "default",
    "uvicorn.access": "access",
    "runcommand": "default",
}


class ReadyCheckFilter(logging.Filter):
    """Drops uvicorn access records for GET requests to quiet paths."""

    def __init__(self, paths: Optional[Iterable[str]] = None):
        super().__init__()
        self.paths = frozenset(paths or QUIET_PATHS)

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True

        # uvicorn logs access lines as (client_addr, method, path, http_version, status_code)
        args = record.args
        if not isinstance(args, tuple) or len(args) != 5:
            return True

        method, path = args[1], str(args[2])
        return not (method == "GET" and path.split("?", 1)[0] in self.paths)


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Build the dictConfig used both at startup and by uvicorn.run."""
    level = level.upper()
    loggers = {
        name: {"handlers": [handler], "level": level, "propagate": False}
        for name, handler in _LOGGER_HANDLERS.items()
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "ready_check_filter": {"()": ReadyCheckFilter},
        },
        "formatters": {
            "default": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "access": {"format": "%(asctime)s - access - %(message)s"},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["ready_check_filter"],
            },
        },
        "loggers": loggers,
        "root": {"level": level, "handlers": ["default"]},
    }
