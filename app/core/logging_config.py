import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Send application logs to stdout, where gunicorn/uvicorn logs already go."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
