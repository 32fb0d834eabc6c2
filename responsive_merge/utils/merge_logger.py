"""
Merge Debug Logger for tracking merge runs and their passes.

Supports configurable log levels (NONE, INFO, DEBUG, TRACE) and dual output:
- Console: Human-readable formatted output
- File: JSON Lines format for parsing and analysis
"""

import json
import os
import time
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from dotenv import load_dotenv


class LogLevel(Enum):
    """Logging levels for merge debug output."""

    NONE = 0
    INFO = 1
    DEBUG = 2
    TRACE = 3


class MergeLogger:
    """Centralized logger for merge runs with configurable levels."""

    _instance: Optional["MergeLogger"] = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger with configuration from environment."""
        if self._initialized:
            return

        load_dotenv()

        # Get log level from environment
        level_str = os.getenv("MERGE_DEBUG_LEVEL", "NONE").upper()
        try:
            self.level = LogLevel[level_str]
        except KeyError:
            self.level = LogLevel.NONE

        # Get file logging configuration
        self.log_to_file = os.getenv("MERGE_LOG_TO_FILE", "true").lower() == "true"
        self.log_dir = Path(os.getenv("MERGE_LOG_DIR", "outputs"))

        self._initialized = True

    def _should_log(self, min_level: LogLevel) -> bool:
        """Check if we should log at the given level."""
        return self.level.value >= min_level.value

    def _format_timestamp(self) -> str:
        """Get ISO8601 formatted timestamp."""
        return datetime.now().isoformat()

    def _truncate_content(self, content: str, max_len: int = 200) -> str:
        """Truncate content for preview."""
        if len(content) <= max_len:
            return content
        return content[:max_len] + "... [truncated]"

    def _format_stats(self, stats: Dict[str, Any]) -> str:
        """Format a stats fragment as indented key/value lines."""
        lines = []
        for key, value in stats.items():
            if isinstance(value, dict):
                value = ", ".join(f"{k}={v}" for k, v in value.items())
            lines.append(f"    {key}: {value}")
        return "\n".join(lines)

    def _write_to_file(self, sample_id: Optional[str], log_entry: Dict[str, Any]):
        """Write log entry to JSON Lines file."""
        if not self.log_to_file or not sample_id:
            return

        log_file = self.log_dir / sample_id / "logs" / "merge_passes.jsonl"
        log_file.parent.mkdir(parents=True, exist_ok=True)

        # Append to file (JSON Lines format)
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")

    def log_run_start(
        self,
        sample_id: Optional[str] = None,
        passes: Optional[list] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Log the start of a merge run.

        Returns:
            Run ID (UUID string) for tracking this run, empty when disabled
        """
        if not self._should_log(LogLevel.INFO):
            return ""

        run_id = str(uuid.uuid4())
        timestamp = self._format_timestamp()

        console_msg = f"[{timestamp}] 🔵 Merge run started"
        if sample_id:
            console_msg += f" | sample_id: {sample_id}"
        if passes:
            console_msg += f" | {len(passes)} passes"
        print(console_msg)

        self._write_to_file(sample_id, {
            "timestamp": timestamp,
            "level": self.level.name,
            "event": "run_start",
            "run_id": run_id,
            "sample_id": sample_id,
            "passes": passes or [],
            "metadata": metadata or {},
        })

        return run_id

    def log_pass(
        self,
        run_id: str,
        pass_name: str,
        stats: Dict[str, Any],
        start_time: float,
        end_time: float,
        sample_id: Optional[str] = None,
    ):
        """Log the completion of one pass with its stats fragment."""
        if not self._should_log(LogLevel.INFO):
            return

        timestamp = self._format_timestamp()
        latency_ms = (end_time - start_time) * 1000

        print(f"[{timestamp}] ✅ Pass: [{pass_name}] | {latency_ms:.1f}ms")
        if self._should_log(LogLevel.DEBUG) and stats:
            print(self._format_stats(stats))

        log_entry = {
            "timestamp": timestamp,
            "level": self.level.name,
            "event": "pass",
            "run_id": run_id,
            "pass": pass_name,
            "sample_id": sample_id,
            "timing": {
                "latency_ms": latency_ms,
                "start_time": datetime.fromtimestamp(start_time).isoformat(),
                "end_time": datetime.fromtimestamp(end_time).isoformat(),
            },
            "stats": stats if self.level.value >= LogLevel.DEBUG.value else None,
        }
        self._write_to_file(sample_id, log_entry)

    def log_event(
        self,
        component: str,
        message: str,
        level: LogLevel = LogLevel.DEBUG,
        sample_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Log a per-element decision made inside a pass."""
        if not self._should_log(level):
            return

        timestamp = self._format_timestamp()
        print(f"  [{component}] {self._truncate_content(message, 150)}")

        self._write_to_file(sample_id, {
            "timestamp": timestamp,
            "level": level.name,
            "event": "detail",
            "component": component,
            "message": message,
            "sample_id": sample_id,
            "details": details or {},
        })

    def log_error(
        self,
        run_id: str,
        pass_name: str,
        error: Exception,
        sample_id: Optional[str] = None,
    ):
        """Log a pass failure that aborts the run."""
        if not self._should_log(LogLevel.INFO):
            return

        timestamp = self._format_timestamp()
        print(f"[{timestamp}] ❌ Pass Error: [{pass_name}] {type(error).__name__}: {str(error)}")

        self._write_to_file(sample_id, {
            "timestamp": timestamp,
            "level": self.level.name,
            "event": "error",
            "run_id": run_id,
            "pass": pass_name,
            "sample_id": sample_id,
            "error": {"type": type(error).__name__, "message": str(error)},
        })


def get_logger() -> MergeLogger:
    """Get the singleton logger instance."""
    return MergeLogger()


class LoggedPass:
    """
    Wrapper around a pass function to add debug logging.

    Times each call and logs the returned stats fragment; errors are logged
    and re-raised.
    """

    def __init__(
        self,
        pass_fn: Callable[..., Dict[str, Any]],
        pass_name: str,
        run_id: str = "",
        sample_id: Optional[str] = None,
    ):
        """
        Initialize LoggedPass wrapper.

        Args:
            pass_fn: Pass function taking a MergeContext and returning stats
            pass_name: Pass name used in log lines
            run_id: Run ID from log_run_start
            sample_id: Optional sample ID for file logging
        """
        self.pass_fn = pass_fn
        self.pass_name = pass_name
        self.run_id = run_id
        self.sample_id = sample_id
        self.logger = get_logger()

    def __call__(self, context: Any) -> Dict[str, Any]:
        if not self.run_id:
            # Logging disabled, just call directly
            return self.pass_fn(context)

        start_time = time.time()
        try:
            stats = self.pass_fn(context)
        except Exception as e:
            self.logger.log_error(self.run_id, self.pass_name, e, sample_id=self.sample_id)
            raise
        end_time = time.time()

        self.logger.log_pass(
            run_id=self.run_id,
            pass_name=self.pass_name,
            stats=stats,
            start_time=start_time,
            end_time=end_time,
            sample_id=self.sample_id,
        )
        return stats
