"""
Logging configuration for the service.

Console output always; optionally forwards records to a centralized
logging service over a socket when LOGGING_HOST is configured.
"""
import logging
import logging.handlers
from typing import Optional


def setup_logger(
    service_name: str,
    level: str = "INFO",
    log_host: Optional[str] = None,
    log_port: int = 9999
) -> logging.Logger:
    """
    Setup the package logger.

    Args:
        service_name: Logger name; module loggers below it propagate here
        level: Log level name
        log_host: Central logging service host (None disables socket handler)
        log_port: Central logging service port

    Returns:
        Configured logger
    """
    logger = logging.getLogger(service_name)
    logger.setLevel(level.upper())

    # Remove existing handlers
    logger.handlers = []

    if log_host:
        socket_handler = logging.handlers.SocketHandler(log_host, log_port)
        logger.addHandler(socket_handler)

    console_handler = logging.StreamHandler()
    console_formatter = logging.Formatter(
        f'%(asctime)s - [{service_name}] - %(levelname)s - %(name)s - %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    return logger
