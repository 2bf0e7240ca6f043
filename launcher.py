"""Packaged launcher for the business-day dashboard."""

from __future__ import annotations

import os
import pathlib
import sys

from bizdays.settings import STORAGE_ENV_VAR


def _bundle_root() -> pathlib.Path:
    if getattr(sys, "frozen", False):
        return pathlib.Path(getattr(sys, "_MEIPASS"))
    return pathlib.Path(__file__).resolve().parent


def _runtime_root() -> pathlib.Path:
    if getattr(sys, "frozen", False):
        return pathlib.Path(sys.executable).resolve().parent
    return pathlib.Path(__file__).resolve().parent


def streamlit_argv(app_path: pathlib.Path) -> list[str]:
    return [
        "streamlit",
        "run",
        str(app_path),
        "--server.headless=false",
        "--browser.gatherUsageStats=false",
    ]


def main() -> None:
    app_path = _bundle_root() / "app.py"
    runtime_root = _runtime_root()

    # Runtime logs land beside the executable unless overridden.
    os.environ.setdefault(STORAGE_ENV_VAR, str(runtime_root / ".local_store"))
    os.environ.setdefault("STREAMLIT_BROWSER_GATHER_USAGE_STATS", "false")

    from streamlit.web import cli as stcli

    sys.argv = streamlit_argv(app_path)
    raise SystemExit(stcli.main())


if __name__ == "__main__":
    main()
