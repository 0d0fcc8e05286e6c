import logging
import sys

from pythonjsonlogger import jsonlogger

CONSOLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Route all records to stdout, as JSON unless log_format is "console"."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    if root_logger.handlers:
        root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if log_format == "console":
        formatter = logging.Formatter(CONSOLE_FORMAT)
    else:
        formatter = jsonlogger.JsonFormatter(fmt=JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%SZ")
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Access logs duplicate what the duration histogram already records
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
