"""
Logging setup for the Lambda workers.

Lambda's runtime installs its own root handler; configure_logging replaces
it with a single stdout handler so every line has the same shape in
CloudWatch.

Dependencies: logging (stdlib)
System role: Centralized logging configuration
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# SDK and HTTP loggers that log every request at INFO/DEBUG
NOISY_LOGGERS = ("urllib3", "botocore", "boto3", "httpx", "httpcore", "google_genai")


def configure_logging(level: str = "INFO") -> None:
    """
    Install the stdout handler on the root logger.

    Safe to call again (e.g. on each cold start); existing root handlers are
    replaced rather than stacked.

    Args:
        level: Root log level name (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
