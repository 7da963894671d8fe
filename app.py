#  Copyright 2024 Canonical Ltd.
#  See LICENSE file for licensing details.

"""The main entry point for the webhook verifier."""
import logging

from flask import Flask

# gunicorn is set up to use an app.py file with a flask app named app.
from webhook_verifier.app import ConfigError, app, config_app

LEVEL_NAME_MAPPING = {
    'CRITICAL': logging.CRITICAL,
    'FATAL': logging.FATAL,
    'ERROR': logging.ERROR,
    'WARN': logging.WARNING,
    'WARNING': logging.WARNING,
    'INFO': logging.INFO,
    'DEBUG': logging.DEBUG,
    'NOTSET': logging.NOTSET,
}


def _set_up_logging(app: Flask) -> None:
    """Set up logging for the application.

    Raises:
        ConfigError: If the log level is invalid.
    """
    _set_log_handlers(app)
    _set_log_level(app)


def _set_log_handlers(app: Flask) -> None:
    """Set the log handlers of the application.

    Args:
        app: The Flask application.
    """
    # we use the gunicorn logger to ensure that logs are captured by the process manager
    gunicorn_logger = logging.getLogger('gunicorn.error')
    app.logger.handlers = gunicorn_logger.handlers


def _set_log_level(app: Flask) -> None:
    """Set the log level of the application.

    Args:
        app: The Flask application.

    Raises:
        ConfigError: If the log level is invalid.
    """
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    try:
        level = LEVEL_NAME_MAPPING[level_name]
    except KeyError:
        raise ConfigError(f"Invalid log level: {app.config.get('LOG_LEVEL')}")
    app.logger.setLevel(level)


# gunicorn will run this file, so we need to configure the app and set up logging
config_app(app)
_set_up_logging(app)
