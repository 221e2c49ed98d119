"""
Session Logging

One JSON object per line, keyed by the switch a record is about.

Log calls attach device context with ``extra=device_fields(server, port)``;
the formatter lifts those keys to the top level of the entry so every
line about a switch can be filtered by ``server``/``port``.
"""

import logging
import logging.config
import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import yaml

PACKAGE_LOGGER = "cxsession"

# Never written, even if a caller passes them in extra_fields
_REDACTED_FIELDS = {'password', 'cookie', 'cookies', 'session'}


def device_fields(server: str, port: int, **context: Any) -> Dict[str, Dict[str, Any]]:
    """
    Build the ``extra`` mapping for a log call about one switch.
    
    Example:
        >>> logger.info("Connected", extra=device_fields("sw1", 443, api_version="10.09"))
    """
    return {'extra_fields': {'server': server, 'port': port, **context}}


class StructuredFormatter(logging.Formatter):
    """JSON lines: timestamp, level, logger, message, plus device context"""
    
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage()
        }
        
        for key, value in getattr(record, 'extra_fields', {}).items():
            if key not in _REDACTED_FIELDS:
                entry[key] = value
        
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        
        return json.dumps(entry, default=str)


def _install_fallback(level: int):
    """Structured console output on the package logger when no YAML config applies"""
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
    logger.setLevel(level)


def configure_logging(config_path: Optional[str] = None, default_level: int = logging.INFO) -> bool:
    """
    Configure logging from a YAML dictConfig file.
    
    Args:
        config_path: Path to YAML logging config
        default_level: Package log level when the file is missing or invalid
    
    Returns:
        True if the YAML config was applied, False if the fallback was used
    """
    if not config_path or not os.path.isfile(config_path):
        _install_fallback(default_level)
        return False
    
    try:
        with open(config_path, "r", encoding="utf-8") as handle:
            config = yaml.safe_load(handle)
        
        if not isinstance(config, dict):
            raise ValueError("Logging config must be a mapping")
        
        logging.config.dictConfig(config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        _install_fallback(default_level)
        logging.getLogger(__name__).warning(
            f"Logging config {config_path} not applied: {e}"
        )
        return False
    
    return True
