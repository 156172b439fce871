"""
Logging configuration.

On Cloud Run the root logger is wired to Google Cloud Logging. Locally a
stdout handler prints records with any structured json_fields appended.
"""

import json
import logging
import os
import sys

# Flag to track if logging is already configured
_logging_configured = False


class LocalFormatter(logging.Formatter):
    """Formatter that appends json_fields from the extra dict."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)

        json_fields = getattr(record, "json_fields", None)
        if json_fields:
            fields_str = json.dumps(json_fields, indent=2, default=str)
            message = f"{message}\n{fields_str}"

        return message


def setup_logging(service_name: str = "shipmail", debug: bool = False, stream=None):
    """
    Configure root logging once per process.

    Uses google-cloud-logging when K_SERVICE is set, otherwise a local
    stdout handler.

    Args:
        service_name: Name of the service for log identification
        debug: Log at DEBUG level instead of INFO
        stream: Local handler stream, stdout when omitted. The command line
            passes stderr so that stdout carries only its JSON results.
    """
    global _logging_configured

    if _logging_configured:
        return

    level = logging.DEBUG if debug else logging.INFO

    if os.getenv("K_SERVICE"):
        _setup_cloud_logging(service_name, level, stream)
    else:
        _setup_local_logging(level, stream)

    _logging_configured = True


def _setup_cloud_logging(service_name: str, level: int, stream=None):
    try:
        import google.cloud.logging

        client = google.cloud.logging.Client()
        client.setup_logging(log_level=level)

        logging.info(f"Cloud Logging configured for service: {service_name}")
    except Exception as e:
        # Fall back to local logging if Cloud Logging setup fails
        _setup_local_logging(level, stream)
        logging.warning(f"Failed to setup Cloud Logging, using local logging: {e}")


def _setup_local_logging(level: int, stream=None):
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        LocalFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
