"""Colored clone logger — ANSI-colored console logging for the duplication engine.

Provides a CloneLogger with color-coded output per duplication step,
making it easy to follow a recursive clone tree in the terminal.

Color scheme:
    🟢 Green   — Save
    🟡 Yellow  — File duplication
    🔵 Blue    — Linked relations
    🟣 Magenta — Owned relations
    🔴 Red     — Errors
    ⚪ Gray    — Details
    ⚙️  White   — Whole clone tree
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


# ── Clone Stage Definitions ──────────────────────────────────────────

class CloneStage:
    """Predefined duplication steps with colors and icons."""

    FILES = ("FILES", _Colors.YELLOW, "📄")
    SAVE = ("SAVE", _Colors.GREEN, "💾")
    LINK = ("LINK", _Colors.BLUE, "🔗")
    OWNED = ("OWNED", _Colors.MAGENTA, "🌿")
    CLONE = ("CLONE", _Colors.WHITE, "⚙️")


# ── CloneLogger ──────────────────────────────────────────────────────

class CloneLogger:
    """Color-coded logger for the duplication engine.

    Usage:
        log = CloneLogger("Cloner")
        log.step_start(CloneStage.CLONE, "Duplicating ArticleModel#4")
        log.detail("Skipped exempt attributes", count=3)
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _format_details(kwargs, _Colors.GRAY))

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _format_details(kwargs, _Colors.GRAY))

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a failed step in red."""
        label, _, _ = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log additional detail (gray/dimmed) at DEBUG level."""
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        self._logger.debug(formatted + _format_details(kwargs, _Colors.DIM))

    @asynccontextmanager
    async def timed_step(self, stage: tuple[str, str, str], message: str, **kwargs: Any):
        """Async context manager that logs start/end with elapsed time.

        Usage:
            async with log.timed_step(CloneStage.CLONE, "Duplicating ArticleModel#4"):
                clone = await cloner.duplicate(article)
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} — failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} — {elapsed:.2f}s", **kwargs)


def _format_details(details: dict[str, Any], color: str) -> str:
    if not details:
        return ""
    joined = " | ".join(f"{k}={v}" for k, v in details.items())
    return f" {color}({joined}){_Colors.RESET}"
