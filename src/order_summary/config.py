"""Unified configuration for POS Order Summary.

This module provides a single configuration class used by the report
sources and the summary service. Values come from ``HR_*`` environment
variables and can be overridden with keyword arguments.

Environment:
    HR_BASE: Portal base URL (e.g. https://hub.hungerrush.com)
    HR_USER: Portal username
    HR_PASS: Portal password
    HR_STORE: Store name as shown in the portal (default "Piqua")
    HR_STORE_ID: Optional numeric store id, skips the store lookup
    HR_DOWNLOAD_DIR: Where export workbooks are saved / watched
    HR_TIMEOUT=60          # seconds per HTTP request
    HR_RETRIES=3
    HR_FETCH_TIMEOUT=90    # overall ceiling for one report fetch
    HR_EXPORT_WAIT=30      # bounded wait for an export to materialise
    HR_OFFLINE=0           # 1/true/yes: answer from cache or fallback only

Portal paths (relative to HR_BASE; override when the vendor moves them):
    HR_LOGON_PATH=/Account/LogOn
    HR_REPORT_PATH=/Reporting/OrderDetails
    HR_RUN_PATH=/Reporting/RunOrderDetails
    HR_EXPORT_PATH=/Reporting/ExportOrderDetails
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from order_summary.exceptions import ConfigError

DEFAULT_STORE = "Piqua"
DEFAULT_DOWNLOAD_DIR = Path("downloads")

DEFAULT_LOGON_PATH = "/Account/LogOn"
DEFAULT_REPORT_PATH = "/Reporting/OrderDetails"
# Run and export endpoints have not been confirmed against the live portal
DEFAULT_RUN_PATH = "/Reporting/RunOrderDetails"
DEFAULT_EXPORT_PATH = "/Reporting/ExportOrderDetails"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


@dataclass(frozen=True)
class ReportConfig:
    """Settings for fetching the order-details report.

    Attributes:
        base_url: Portal base URL, without trailing slash.
        username: Portal login.
        password: Portal password.
        store: Store name to select in the report.
        store_id: Explicit store id; when set the name lookup is skipped.
        download_dir: Directory where export workbooks are written or watched.
        http_timeout: Default timeout in seconds for each HTTP request.
        http_retries: Retry attempts for transient HTTP failures.
        fetch_timeout: Ceiling in seconds for one complete report fetch.
        export_wait: Seconds to wait for an export artifact to appear.
        offline: Never contact the portal; serve cached or fallback data.
        logon_path: Portal login page.
        report_path: Order Details report page.
        run_path: Endpoint that runs the report for a store and date range.
        export_path: Endpoint that returns the report as a workbook.
    """

    base_url: str | None = None
    username: str | None = None
    password: str | None = None
    store: str = DEFAULT_STORE
    store_id: str | None = None
    download_dir: Path = DEFAULT_DOWNLOAD_DIR
    http_timeout: float = 60.0
    http_retries: int = 3
    fetch_timeout: float = 90.0
    export_wait: float = 30.0
    offline: bool = False
    logon_path: str = DEFAULT_LOGON_PATH
    report_path: str = DEFAULT_REPORT_PATH
    run_path: str = DEFAULT_RUN_PATH
    export_path: str = DEFAULT_EXPORT_PATH

    @classmethod
    def from_env(cls, **overrides: Any) -> ReportConfig:
        """Build a config from ``HR_*`` environment variables.

        Keyword overrides whose value is not None win over the environment.

        Raises:
            ConfigError: If a numeric variable cannot be parsed or an
                override names an unknown field.

        Examples:
            >>> cfg = ReportConfig.from_env(store="Troy", offline=True)
            >>> cfg.store
            'Troy'
        """
        base_url = os.environ.get("HR_BASE")
        config = cls(
            base_url=base_url.rstrip("/") if base_url else None,
            username=os.environ.get("HR_USER") or None,
            password=os.environ.get("HR_PASS") or None,
            store=os.environ.get("HR_STORE") or DEFAULT_STORE,
            store_id=os.environ.get("HR_STORE_ID") or None,
            download_dir=Path(os.environ.get("HR_DOWNLOAD_DIR") or DEFAULT_DOWNLOAD_DIR),
            http_timeout=_env_float("HR_TIMEOUT", 60.0),
            http_retries=_env_int("HR_RETRIES", 3),
            fetch_timeout=_env_float("HR_FETCH_TIMEOUT", 90.0),
            export_wait=_env_float("HR_EXPORT_WAIT", 30.0),
            offline=(os.environ.get("HR_OFFLINE") or "").strip().lower() in _TRUTHY,
            logon_path=os.environ.get("HR_LOGON_PATH") or DEFAULT_LOGON_PATH,
            report_path=os.environ.get("HR_REPORT_PATH") or DEFAULT_REPORT_PATH,
            run_path=os.environ.get("HR_RUN_PATH") or DEFAULT_RUN_PATH,
            export_path=os.environ.get("HR_EXPORT_PATH") or DEFAULT_EXPORT_PATH,
        )
        return config.with_overrides(**overrides)

    def with_overrides(self, **overrides: Any) -> ReportConfig:
        """Return a copy with the non-None overrides applied."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigError(f"Unknown config field(s): {', '.join(unknown)}")
        changes = {k: v for k, v in overrides.items() if v is not None}
        if isinstance(changes.get("download_dir"), str):
            changes["download_dir"] = Path(changes["download_dir"])
        if isinstance(changes.get("base_url"), str):
            changes["base_url"] = changes["base_url"].rstrip("/")
        return replace(self, **changes)

    def require_credentials(self) -> None:
        """Ensure everything needed to log into the portal is present.

        Raises:
            ConfigError: Naming every missing environment variable.
        """
        missing = [
            name
            for name, value in (
                ("HR_BASE", self.base_url),
                ("HR_USER", self.username),
                ("HR_PASS", self.password),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"Portal credentials not configured: {', '.join(missing)}")
        if self.fetch_timeout <= 0:
            raise ConfigError(f"fetch_timeout must be positive, got {self.fetch_timeout}")
