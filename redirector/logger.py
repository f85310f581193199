"""
Structured logging for the redirector.

Provides centralized logging with console and file outputs, plus counters
for reconciliations and self-test outcomes.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks how URLs were reconciled and how self-test cases fared.
    """

    def __init__(
        self,
        name: str = "redirector",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        self.metrics = {
            "reconciliations": 0,
            "reconciled_by": {},
            "cases_run": 0,
            "cases_passed": 0,
            "cases_failed": 0,
            "failed_cases": [],
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"redirector_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    def record_reconciliation(self, provenance: str):
        """Count a reconciled URL under the rule that produced it."""
        key = str(getattr(provenance, "value", provenance))
        self.metrics["reconciliations"] += 1
        by_rule = self.metrics["reconciled_by"]
        by_rule[key] = by_rule.get(key, 0) + 1

    def record_case(self, case_id: str, passed: bool):
        """Record the outcome of one self-test case."""
        self.metrics["cases_run"] += 1
        if passed:
            self.metrics["cases_passed"] += 1
        else:
            self.metrics["cases_failed"] += 1
            self.metrics["failed_cases"].append(case_id)

    def get_metrics(self) -> dict:
        """Return current metrics, with the self-test pass rate when cases ran."""
        metrics_copy = dict(self.metrics)
        metrics_copy["reconciled_by"] = dict(self.metrics["reconciled_by"])
        metrics_copy["failed_cases"] = list(self.metrics["failed_cases"])
        if metrics_copy["cases_run"] > 0:
            metrics_copy["pass_rate"] = round(
                metrics_copy["cases_passed"] / metrics_copy["cases_run"], 3
            )
        return metrics_copy

    def log_metrics_summary(self):
        metrics = self.get_metrics()

        self.info("=== Redirector Session Metrics ===")
        self.info(f"Reconciliations: {metrics['reconciliations']}")
        for rule, count in sorted(metrics["reconciled_by"].items()):
            self.info(f"  {rule}: {count}")

        if metrics["cases_run"]:
            rate = metrics.get("pass_rate", 0) * 100
            self.info(
                f"Self-test: {metrics['cases_passed']}/{metrics['cases_run']} ({rate:.1f}% pass)"
            )
        if metrics["failed_cases"]:
            self.info(f"Failed cases: {', '.join(metrics['failed_cases'])}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "redirector",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Level and file output default to the REDIRECTOR_LOG_LEVEL and
    REDIRECTOR_LOG_DIR settings; file output is off unless a directory is set.

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        from .env import get_settings

        settings = get_settings()
        kwargs.setdefault("log_dir", settings.log_dir)
        kwargs.setdefault("enable_file", kwargs["log_dir"] is not None)
        _global_logger = StructuredLogger(
            name=name, level=level or settings.log_level, **kwargs
        )

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
