"""
Structured JSON Logging for Statistics Accessors

Deterministic, parseable event logging for resolution, reset and
availability events. No external dependencies - pure Python.
"""

import json
import threading
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .config import get_config


@dataclass
class LogEvent:
    """Structured log event."""
    wall_time: str
    monotonic_ns: int
    node_id: str
    component: str
    level: str
    event_type: str
    message: str = ""
    template: Optional[str] = None
    object_name: Optional[str] = None
    attempts: Optional[int] = None
    error_type: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


class StatsLogger:
    """
    Structured JSON logger for statistics events.

    Writes JSON Lines to a file when an output directory is known, with
    optional console output. Thread-safe.
    """

    def __init__(
        self,
        component: str,
        node_id: str = "local",
        output_dir: Optional[Path] = None,
        console_output: Optional[bool] = None
    ):
        config = get_config()
        self.component = component
        self.node_id = node_id
        self.console_output = config.log_console if console_output is None else console_output
        self.events_written = 0
        self._lock = threading.Lock()
        self._file_handle = None
        self.log_file: Optional[Path] = None

        if output_dir is None and config.log_dir:
            output_dir = Path(config.log_dir)

        if output_dir is not None:
            output_dir = Path(output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.log_file = output_dir / f"{component}_{timestamp}.jsonl"
            self._file_handle = open(self.log_file, "a")

    def _create_event(self, level: str, event_type: str, message: str = "", **kwargs) -> LogEvent:
        """Create a structured log event."""
        return LogEvent(
            wall_time=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            monotonic_ns=time.monotonic_ns(),
            node_id=self.node_id,
            component=self.component,
            level=level,
            event_type=event_type,
            message=message,
            **kwargs
        )

    def _write(self, event: LogEvent):
        """Write event to log file and optionally console."""
        event_dict = asdict(event)
        # Remove None values for cleaner output
        event_dict = {k: v for k, v in event_dict.items() if v is not None}
        if not event_dict.get("extra"):
            event_dict.pop("extra", None)

        json_line = json.dumps(event_dict, separators=(',', ':'), default=str)

        with self._lock:
            self.events_written += 1
            if self._file_handle is not None:
                self._file_handle.write(json_line + "\n")
                self._file_handle.flush()

            if self.console_output:
                print(f"[{event.wall_time[11:19]}] [{event.level}] {event.event_type}: {event.message}")

    def info(self, event_type: str, message: str = "", **kwargs):
        """Log an info event."""
        self._write(self._create_event("INFO", event_type, message, **kwargs))

    def warning(self, event_type: str, message: str = "", **kwargs):
        """Log a non-fatal warning event."""
        self._write(self._create_event("WARN", event_type, message, **kwargs))

    def error(self, event_type: str, message: str = "", error_type: str = "error", **kwargs):
        """Log an error event."""
        self._write(self._create_event("ERROR", event_type, message, error_type=error_type, **kwargs))

    def close(self):
        """Close the log file, if any."""
        with self._lock:
            if self._file_handle is not None:
                self._file_handle.close()
                self._file_handle = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.error("logger_error", str(exc_val), error_type=exc_type.__name__)
        self.close()
        return False


# Global logger registry
_loggers: Dict[str, StatsLogger] = {}
_logger_lock = threading.Lock()


def get_logger(component: str = "statsprobe", node_id: str = "local", **kwargs) -> StatsLogger:
    """
    Get or create a logger for the given component.

    Thread-safe singleton per component.
    """
    with _logger_lock:
        if component not in _loggers:
            _loggers[component] = StatsLogger(component, node_id, **kwargs)
        return _loggers[component]


def close_all_loggers():
    """Close all active loggers."""
    with _logger_lock:
        for logger in _loggers.values():
            logger.close()
        _loggers.clear()
