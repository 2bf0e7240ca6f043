"""Runtime diagnostics logging for the feeds, CLI, and dashboard."""

from __future__ import annotations

import json
import sys
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from bizdays.settings import expand_storage_root, load_settings


LOG_DIR = Path(".local_store")
RUNTIME_EVENTS_LOG_FILE = LOG_DIR / "runtime_events.jsonl"

_EXCEPTION_HOOK_INSTALLED = False


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _safe_json_default(value: Any):
    if isinstance(value, (set, frozenset, tuple)):
        return sorted(value) if isinstance(value, (set, frozenset)) else list(value)
    return str(value)


def configure_log_root(path_value: str | Path | None) -> Path:
    global LOG_DIR, RUNTIME_EVENTS_LOG_FILE
    LOG_DIR = expand_storage_root(path_value)
    RUNTIME_EVENTS_LOG_FILE = LOG_DIR / "runtime_events.jsonl"
    return LOG_DIR


def runtime_log_path() -> str:
    return str(RUNTIME_EVENTS_LOG_FILE.resolve())


def _exception_fields(exc: BaseException) -> dict[str, str]:
    fields = {
        "exception_type": type(exc).__name__,
        "exception_message": str(exc),
    }
    if exc.__traceback__ is not None:
        fields["traceback"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return fields


def append_runtime_event(
    level: str,
    event: str,
    message: str,
    context: dict[str, Any] | None = None,
    exc: BaseException | None = None,
) -> None:
    """Append one structured event line to the runtime log.

    Failures while writing are swallowed so that diagnostics can never turn a
    served response into an error.
    """
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        record: dict[str, Any] = {
            "timestamp_utc": _now_iso(),
            "level": str(level).upper(),
            "event": str(event),
            "message": str(message),
            "context": context or {},
        }
        if exc is not None:
            record.update(_exception_fields(exc))
        with RUNTIME_EVENTS_LOG_FILE.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, default=_safe_json_default, ensure_ascii=False) + "\n")
    except Exception:
        pass


def read_runtime_events(limit: int = 200, event: str | None = None) -> list[dict[str, Any]]:
    """Return the newest ``limit`` events, optionally only those named ``event``."""
    if limit <= 0 or not RUNTIME_EVENTS_LOG_FILE.exists():
        return []
    try:
        lines = RUNTIME_EVENTS_LOG_FILE.read_text(encoding="utf-8").splitlines()
    except OSError:
        return []
    out: list[dict[str, Any]] = []
    for line in lines:
        if not line.strip():
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError:
            record = {
                "timestamp_utc": _now_iso(),
                "level": "ERROR",
                "event": "log_parse_error",
                "message": "Malformed log line encountered.",
                "context": {"line": line},
            }
        if event is not None and record.get("event") != event:
            continue
        out.append(record)
    return out[-int(limit) :]


def install_global_exception_logging() -> None:
    """Record uncaught exceptions raised during a Streamlit script run."""
    global _EXCEPTION_HOOK_INSTALLED
    if _EXCEPTION_HOOK_INSTALLED:
        return
    from streamlit.runtime.scriptrunner import get_script_run_ctx

    old_hook = sys.excepthook

    def _hook(exc_type, exc, exc_tb):
        try:
            # CLI runs keep the default hook output only.
            if get_script_run_ctx() is not None:
                append_runtime_event(
                    level="ERROR",
                    event="uncaught_exception",
                    message=str(exc),
                    exc=exc,
                )
        except Exception:
            pass
        old_hook(exc_type, exc, exc_tb)

    sys.excepthook = _hook
    _EXCEPTION_HOOK_INSTALLED = True


configure_log_root(load_settings().storage_root)
