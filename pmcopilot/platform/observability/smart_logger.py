from __future__ import annotations

import importlib
import importlib.util
import json
import logging
import os
import traceback
from pathlib import Path
from typing import Protocol


class _SmartLoggerLike(Protocol):
    @classmethod
    def log(
        cls,
        level: str,
        message: str,
        category: str | None = None,
        params: dict | None = None,
        max_inline_chars: int = 100,
    ) -> None: ...


def _load_smart_logger_from_file(py_file: Path) -> type[_SmartLoggerLike]:
    spec = importlib.util.spec_from_file_location("private_smart_logger", str(py_file))
    if spec is None or spec.loader is None:
        raise ImportError(f"Failed to create import spec from file: {py_file}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)  # type: ignore[call-arg]
    cls = getattr(module, "SmartLogger", None)
    if cls is None:
        raise ImportError(f"`SmartLogger` not found in {py_file}")
    if not hasattr(cls, "log") or not callable(getattr(cls, "log")):
        raise TypeError(f"`SmartLogger.log` missing or not callable in {py_file}")
    return cls


def _load_smart_logger_from_module(module_path: str) -> type[_SmartLoggerLike]:
    module = importlib.import_module(module_path)
    cls = getattr(module, "SmartLogger", None)
    if cls is None:
        raise ImportError(f"`SmartLogger` not found in module: {module_path}")
    if not hasattr(cls, "log") or not callable(getattr(cls, "log")):
        raise TypeError(f"`SmartLogger.log` missing or not callable in module: {module_path}")
    return cls


class _ConsoleLogger:
    """
    Default implementation: one line per event through the `logging` module.

    Format: `[category] message | {params as JSON}`. Params longer than
    max_inline_chars are kept whole at DEBUG and truncated otherwise.
    """

    _logger = logging.getLogger("pmcopilot")

    @classmethod
    def configure(cls) -> None:
        min_level = (os.getenv("SMART_LOGGER_MIN_LEVEL") or "INFO").strip().upper()
        if not cls._logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
            cls._logger.addHandler(handler)
            cls._logger.propagate = False
        cls._logger.setLevel(getattr(logging, min_level, logging.INFO))

    @classmethod
    def log(
        cls,
        level: str,
        message: str,
        category: str | None = None,
        params: dict | None = None,
        max_inline_chars: int = 100,
    ) -> None:
        lvl = getattr(logging, (level or "INFO").upper(), logging.INFO)
        if not cls._logger.isEnabledFor(lvl):
            return
        line = f"[{category}] {message}" if category else message
        if params:
            rendered = json.dumps(params, ensure_ascii=False, default=str)
            if lvl > logging.DEBUG and len(rendered) > max_inline_chars * 10:
                rendered = rendered[: max_inline_chars * 10] + "...(truncated)"
            line = f"{line} | {rendered}"
        cls._logger.log(lvl, line)


def _resolve_impl() -> tuple[type[_SmartLoggerLike], str]:
    """
    Returns (SmartLoggerClass, source_description)
    """
    private = (os.getenv("PRIVATE_LOGGER_PATH") or "").strip()
    if private:
        # 1) Try file path
        p = Path(private)
        if p.exists() and p.is_file():
            return _load_smart_logger_from_file(p), f"PRIVATE_LOGGER_PATH(file)={p}"
        # 2) Try module import path
        return _load_smart_logger_from_module(private), f"PRIVATE_LOGGER_PATH(module)={private}"

    _ConsoleLogger.configure()
    return _ConsoleLogger, "console(logging)"


_IMPL, _IMPL_SOURCE = _resolve_impl()


class SmartLogger:
    """
    Project-wide logger entry point.

    Always import and use this class:
        from pmcopilot.platform.observability.smart_logger import SmartLogger
        SmartLogger.log("INFO", "message", category="...", params={...})
    """

    impl_source: str = _IMPL_SOURCE

    @classmethod
    def log(
        cls,
        level: str,
        message: str,
        category: str | None = None,
        params: dict | None = None,
        max_inline_chars: int = 200,
    ) -> None:
        try:
            _IMPL.log(level, message, category=category, params=params, max_inline_chars=max_inline_chars)
        except Exception:
            # Last-ditch fallback: keep the app running and still emit something.
            err = traceback.format_exc()
            cat = f"[{category}] " if category else ""
            print(f"{level}: {cat}{message}")
            print(f"LOGGER_ERROR: {err}")
