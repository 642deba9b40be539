import logging.config
import sys


def setup_logging(log_level: str = "INFO") -> None:
    """Console logging for the ``tokenup`` package; warnings also go to stderr with their source line."""
    log_level = log_level.upper()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "detailed": {
                    "format": "%(asctime)s | %(levelname)-8s | %(name)s\n%(pathname)s:%(lineno)d\n%(message)s",
                },
                "simple": {
                    "format": "%(asctime)s | %(levelname)-8s | %(name)-32s | %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "formatter": "simple",
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                },
                "error_console": {
                    "formatter": "detailed",
                    "class": "logging.StreamHandler",
                    "stream": sys.stderr,
                    "level": "WARNING",
                },
            },
            "loggers": {
                "": {"handlers": ["console"], "level": log_level},
                "tokenup": {
                    "handlers": ["console", "error_console"],
                    "level": log_level,
                    "propagate": False,
                },
                "sqlalchemy.engine": {"level": "WARNING"},
            },
        }
    )
