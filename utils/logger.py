from __future__ import annotations

import logging
import logging.config
from pathlib import Path

LOG_FILE_NAME = "class_assignment.log"
RULE_TRACE_LOGGERS = ("utils.rules_engine", "utils.rule_compiler")


def configure_logging(log_dir: Path, level: str = "INFO", trace_rules: bool = False) -> Path:
    """Configure console and file loggers.

    Per-rule match decisions are logged at DEBUG by the rules engine; they are
    only let through when ``trace_rules`` is set since a single document can
    produce one line per vocabulary record.
    """

    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME
    rule_level = "DEBUG" if trace_rules else "INFO"

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            },
            "console": {
                "format": "%(levelname)s | %(message)s",
            },
        },
        "handlers": {
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "standard",
                "filename": str(log_path),
                "maxBytes": 1_000_000,
                "backupCount": 3,
                "encoding": "utf-8",
            },
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "level": level.upper(),
            },
        },
        "loggers": {name: {"level": rule_level} for name in RULE_TRACE_LOGGERS},
        "root": {
            "handlers": ["file", "stdout"],
            "level": "DEBUG" if trace_rules else level.upper(),
        },
    }

    logging.config.dictConfig(config)
    logging.getLogger(__name__).debug("Logging configured at %s (rule trace: %s)", level, trace_rules)
    return log_path
