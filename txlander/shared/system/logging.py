"""
Centralized Logger with Rich Console
====================================
Static logger used by every txlander component.

Usage:
    from txlander.shared.system.logging import Logger

    Logger.info("[SUBMIT] Message")
    Logger.success("[WATCHER] Transaction confirmed")
    Logger.warning("Something concerning")
    Logger.error("Something broke")
    Logger.section("Starting Submission")
"""

import os
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.text import Text

from config.settings import Settings


# Per-run session log file
_run_id = datetime.now().strftime("%Y%m%d_%H%M%S")

file_logger = logging.getLogger("txlander")
file_logger.setLevel(logging.DEBUG)
file_logger.propagate = False


def _attach_file_handler(log_dir: str) -> None:
    """Attach the rotating per-run file handler (once per process)."""
    if file_logger.handlers:
        return
    try:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f"txlander_{_run_id}.log")
        handler = RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8", delay=True
        )
    except OSError:
        # Read-only filesystem: console only
        file_logger.addHandler(logging.NullHandler())
        return
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )
    handler.setFormatter(formatter)
    file_logger.addHandler(handler)


_attach_file_handler(Settings.LOG_DIR)


# =============================================================================
# SOURCE ICONS (for visual scanning)
# =============================================================================

SOURCE_ICONS = {
    "SYSTEM": "🛸",
    "SUBMIT": "🚀",
    "BROADCAST": "📡",
    "WATCHER": "👀",
    "DIAGNOSE": "🩺",
    "RPC": "🔌",
    "BATCH": "📦",
}

_console = Console(stderr=True)

# Level colors for Rich
LEVEL_STYLES = {
    "INFO": "cyan",
    "SUCCESS": "green bold",
    "WARNING": "yellow",
    "ERROR": "red bold",
    "DEBUG": "dim",
    "CRITICAL": "red bold reverse",
    "SECTION": "magenta bold",
}


# =============================================================================
# LOGGER CLASS
# =============================================================================

class Logger:
    """
    Centralized logger with Rich console output.

    Features:
    - Color-coded console output with Rich
    - File logging with rotation
    - Source-based icon prefixes parsed from a leading [TAG]
    """

    _silent_mode = False

    @staticmethod
    def _timestamp() -> str:
        """High-precision timestamp (HH:MM:SS.ms)."""
        now = datetime.now()
        return f"{now.strftime('%H:%M:%S')}.{now.microsecond // 1000:03d}"

    @staticmethod
    def _parse_source(message: str) -> tuple:
        """Extract [SOURCE] tag from message if present."""
        stripped = message.strip()
        if stripped.startswith("[") and "]" in stripped:
            tag_end = stripped.index("]")
            source = stripped[1:tag_end].upper()
            if 0 < len(source) < 15:
                return source, stripped[tag_end + 1:].strip()
        return "SYSTEM", message

    @staticmethod
    def _format_console(level: str, message: str, source: str) -> None:
        """Output to console with Rich formatting."""
        if Logger._silent_mode or Settings.SILENT_MODE:
            return

        ts = Logger._timestamp()
        icon = SOURCE_ICONS.get(source.upper(), "")
        msg_with_icon = f"{icon} {message}" if icon else message

        style = LEVEL_STYLES.get(level, "white")
        lvl_display = level[:8].ljust(8)
        src_display = source[:10].ljust(10)

        line = Text()
        line.append(f"{ts} ", style="dim")
        line.append(f"| {lvl_display} ", style=style)
        line.append(f"| {src_display} | ", style="dim")
        line.append(msg_with_icon)

        _console.print(line)

    @staticmethod
    def _log_to_file(level: str, message: str, source: str = "") -> None:
        """Write to file logger."""
        full_msg = f"[{source}] {message}" if source else message
        file_logger.log(getattr(logging, level, logging.INFO), full_msg)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @staticmethod
    def info(message: str) -> None:
        source, msg = Logger._parse_source(message)
        Logger._format_console("INFO", msg, source)
        Logger._log_to_file("INFO", msg, source)

    @staticmethod
    def success(message: str) -> None:
        source, msg = Logger._parse_source(message)
        Logger._format_console("SUCCESS", msg, source)
        Logger._log_to_file("INFO", f"✅ {msg}", source)

    @staticmethod
    def warning(message: str) -> None:
        source, msg = Logger._parse_source(message)
        Logger._format_console("WARNING", msg, source)
        Logger._log_to_file("WARNING", msg, source)

    @staticmethod
    def error(message: str) -> None:
        source, msg = Logger._parse_source(message)
        Logger._format_console("ERROR", msg, source)
        Logger._log_to_file("ERROR", msg, source)

    @staticmethod
    def debug(message: str) -> None:
        source, msg = Logger._parse_source(message)
        Logger._log_to_file("DEBUG", msg, source)

    @staticmethod
    def critical(message: str) -> None:
        source, msg = Logger._parse_source(message)
        Logger._format_console("CRITICAL", f"🛑 {msg}", source)
        Logger._log_to_file("CRITICAL", f"🛑 {msg}", source)

    @staticmethod
    def section(title: str) -> None:
        """Print a section header."""
        if not (Logger._silent_mode or Settings.SILENT_MODE):
            _console.print()
            _console.rule(f"[bold magenta]{title}[/]", style="dim")
        Logger._log_to_file("INFO", f"=== {title} ===", "SYSTEM")

    @staticmethod
    def set_silent(silent: bool) -> None:
        """Enable/disable console output."""
        Logger._silent_mode = silent
