"""Portal report source: order-details export over HTTP.

Logs into the vendor back office with the same form the browser uses,
opens Reporting ▸ Order Details, selects the store and asks for
"Export all data to Excel". The workbook is saved under the configured
download folder and parsed into order records.

Flow:
  1. GET tenant root (seeds cookies)
  2. GET the order-details page; if redirected to the logon page, post the
     login form (user / password fields + anti-forgery token)
  3. Resolve the store id from the page's store list (or HR_STORE_ID)
  4. POST the report run, then the export endpoint
  5. Accept JSON {fileBase64, fileName} or a direct attachment

Every path comes from ``ReportConfig`` (``HR_*_PATH``). The logon and
report pages are the ones a browser visits; the run/export endpoints and
the JSON payload shape have not been verified against the live portal and
can be corrected through configuration.

Notes:
- Transient HTTP errors (429/5xx) are retried with backoff by the session.
- Every request carries a default timeout; the service adds an overall
  ceiling on top of that.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Callable, Iterator, Optional
from urllib.parse import unquote, urlparse

import requests
from bs4 import BeautifulSoup, Tag
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from order_summary.config import DEFAULT_LOGON_PATH, DEFAULT_REPORT_PATH, ReportConfig
from order_summary.exceptions import (
    ConfigError,
    ExportFailedError,
    SourceUnavailableError,
)
from order_summary.orders.cleaning import normalize_label, slugify
from order_summary.orders.records import OrderRecord
from order_summary.source.base import ProgressCallback, TimeRange, report_progress
from order_summary.source.excel import load_orders
from order_summary.status import Stage

logger = logging.getLogger(__name__)

# ASP.NET anti-forgery token: form field, meta tag and request header names
TOKEN_NAME = "__RequestVerificationToken"
TOKEN_FIELDS = (TOKEN_NAME, "__RequestVerificationTokenWith")
TOKEN_HEADER = "RequestVerificationToken"
TOKEN_MARKER = "VerificationToken"

# Login form field names, in order of preference
USER_FIELDS = ("UserName", "Email", "Login", "Username")
PASSWORD_FIELDS = ("Password", "Pass", "Pwd")
RETURN_URL_FIELD = "ReturnUrl"

RETRY_STATUSES = (429, 500, 502, 503, 504)
USER_AGENT = "Mozilla/5.0"

_CD_EXTENDED_RE = re.compile(r"filename\*\s*=\s*(?:[\w-]+'[\w-]*')?([^;]+)", re.IGNORECASE)
_CD_PLAIN_RE = re.compile(r'filename\s*=\s*"?([^";]+)"?', re.IGNORECASE)


# ------------------------- HTTP helpers -------------------------
class TimeoutHTTPAdapter(HTTPAdapter):
    """HTTPAdapter that applies a default timeout to requests sent without one."""

    def __init__(self, timeout: float, **kwargs: Any) -> None:
        self.timeout = timeout
        super().__init__(**kwargs)

    def send(self, request: requests.PreparedRequest, **kwargs: Any) -> requests.Response:
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = self.timeout
        return super().send(request, **kwargs)


def make_session(timeout: float = 60.0, retries: int = 3) -> requests.Session:
    """Session for the portal: browser user agent, retries, default timeout.

    Args:
        timeout: Seconds applied to every request that does not set its own.
        retries: Retry attempts on connection errors and 429/5xx answers;
            backoff doubles from 0.8s.
    """
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=0.8,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=frozenset({"GET", "POST", "HEAD", "OPTIONS"}),
        raise_on_status=False,
    )
    adapter = TimeoutHTTPAdapter(timeout, max_retries=retry)
    s = requests.Session()
    s.headers["User-Agent"] = USER_AGENT
    for prefix in ("http://", "https://"):
        s.mount(prefix, adapter)
    return s


def _attr_text(value: Any) -> str:
    # bs4 returns lists for multi-valued attributes
    if isinstance(value, list):
        value = value[0] if value else None
    return "" if value is None else str(value)


def _origin_for(base_url: str) -> str:
    p = urlparse(base_url)
    return f"{p.scheme}://{p.netloc}"


def _token_candidates(soup: BeautifulSoup) -> Iterator[str]:
    for name in TOKEN_FIELDS:
        for tag in soup.find_all("input", attrs={"name": name}):
            yield _attr_text(tag.get("value"))
    for tag in soup.find_all("meta", attrs={"name": TOKEN_NAME}):
        yield _attr_text(tag.get("content"))
    for tag in soup.find_all("input", attrs={"type": "hidden"}):
        label = _attr_text(tag.get("name")) + _attr_text(tag.get("id"))
        if TOKEN_MARKER in label:
            yield _attr_text(tag.get("value"))


def get_csrf_from_html(html: str) -> str | None:
    """Anti-forgery token of a page, or None.

    Named token inputs win over the meta tag, which wins over any hidden
    input whose name or id mentions "VerificationToken".
    """
    soup = BeautifulSoup(html, "html.parser")
    return next((value for value in _token_candidates(soup) if value), None)


def login_field_names(fields: dict[str, str], html: str) -> tuple[str, str]:
    """Names of the user and password inputs of a login form.

    Known names are preferred; otherwise the password is the form's
    ``type="password"`` input. Defaults are ``UserName`` / ``Password``.
    """
    user = next((name for name in USER_FIELDS if name in fields), USER_FIELDS[0])
    password = next((name for name in PASSWORD_FIELDS if name in fields), None)
    if password is None:
        tag = BeautifulSoup(html, "html.parser").find("input", attrs={"type": "password"})
        password = (_attr_text(tag.get("name")) if isinstance(tag, Tag) else "") or PASSWORD_FIELDS[0]
    return user, password


def parse_login_form(html: str, page_url: str, base_url: str) -> tuple[str, dict[str, str]]:
    """Return the login form's action URL and its current field values.

    Raises:
        SourceUnavailableError: If the page has no form.
    """
    soup = BeautifulSoup(html, "html.parser")
    form = soup.find("form")
    if not isinstance(form, Tag):
        raise SourceUnavailableError("Login form not found on the logon page.")
    action = _attr_text(form.get("action")) or page_url
    action_url = action if action.startswith("http") else f"{_origin_for(base_url)}{action}"

    fields = {
        _attr_text(inp.get("name")): _attr_text(inp.get("value"))
        for inp in form.find_all("input")
        if _attr_text(inp.get("name"))
    }
    return action_url, fields


def _on_logon_page(resp: requests.Response, logon_path: str) -> bool:
    return logon_path in (resp.url or "") or resp.status_code == 401


def login_if_needed(
    s: requests.Session,
    base_url: str,
    user: str | None,
    pwd: str | None,
    report_path: str = DEFAULT_REPORT_PATH,
    logon_path: str = DEFAULT_LOGON_PATH,
) -> requests.Response:
    """Authenticate when the report page redirects to the logon form.

    Returns:
        The order-details page response of the authenticated session.

    Raises:
        ConfigError: Login required but credentials are missing.
        SourceUnavailableError: Login form missing or login rejected.
    """
    seed = s.get(f"{base_url}/")
    if seed.status_code not in (200, 302):
        logger.warning("Seed GET returned %s", seed.status_code)

    r = s.get(f"{base_url}{report_path}", allow_redirects=True)
    if not _on_logon_page(r, logon_path):
        logger.info("No login required.")
        return r

    if not user or not pwd:
        raise ConfigError("Login required but HR_USER/HR_PASS not provided.")

    action_url, fields = parse_login_form(r.text, r.url, base_url)
    user_field, pw_field = login_field_names(fields, r.text)
    fields[user_field] = user
    fields[pw_field] = pwd
    if RETURN_URL_FIELD in fields and not fields[RETURN_URL_FIELD]:
        fields[RETURN_URL_FIELD] = report_path

    headers = {"Referer": r.url, "Origin": _origin_for(base_url)}
    r2 = s.post(action_url, data=fields, headers=headers, allow_redirects=True)
    if r2.status_code not in (200, 302):
        raise SourceUnavailableError(f"Login POST failed. HTTP {r2.status_code}")

    page = s.get(f"{base_url}{report_path}", allow_redirects=True)
    if page.status_code == 200 and not _on_logon_page(page, logon_path):
        logger.info("Login succeeded")
        return page
    raise SourceUnavailableError(
        f"Login failed: still redirected to the logon page (final URL {page.url})."
    )


def resolve_store_id(html: str, store: str) -> str | None:
    """Find the id of a store in the report page's store picker.

    Matches ``<option value="...">Store</option>`` first, then any element
    carrying ``data-value``/``data-id`` whose text is the store name.
    Comparison is case-insensitive on the trimmed text.
    """
    wanted = normalize_label(store)
    soup = BeautifulSoup(html, "html.parser")
    for opt in soup.find_all("option"):
        if isinstance(opt, Tag) and normalize_label(opt.get_text()) == wanted:
            value = _attr_text(opt.get("value"))
            if value:
                return value
    for attr in ("data-value", "data-id"):
        for tag in soup.find_all(attrs={attr: True}):
            if isinstance(tag, Tag) and normalize_label(tag.get_text()) == wanted:
                return _attr_text(tag.get(attr))
    return None


def export_filename(header: str | None) -> str | None:
    """File name from a Content-Disposition header.

    ``filename*=UTF-8''...`` (percent-encoded) wins over ``filename=``.

    Examples:
        >>> export_filename("attachment; filename*=UTF-8''Order%20Details.xlsx")
        'Order Details.xlsx'
        >>> export_filename('attachment; filename="OrderDetails.xlsx"')
        'OrderDetails.xlsx'
    """
    if not header:
        return None
    m = _CD_EXTENDED_RE.search(header)
    if m:
        return unquote(m.group(1).strip().strip('"'))
    m = _CD_PLAIN_RE.search(header)
    return m.group(1).strip() if m else None


def decode_export_response(resp: requests.Response, default_name: str) -> tuple[str, bytes]:
    """Extract the workbook from an export response.

    Accepts JSON ``{"fileBase64": ..., "fileName": ...}`` or a direct
    spreadsheet/attachment response.

    Raises:
        ExportFailedError: On any other payload.
    """
    ct = (resp.headers.get("Content-Type") or "").lower()
    if "application/json" in ct:
        try:
            j = resp.json()
        except ValueError as e:
            raise ExportFailedError(f"Export returned invalid JSON: {e}") from e
        if not isinstance(j, dict) or "fileBase64" not in j:
            keys = list(j.keys()) if isinstance(j, dict) else type(j).__name__
            raise ExportFailedError(f"Export JSON missing 'fileBase64'. Keys: {keys}")
        try:
            content = base64.b64decode(j["fileBase64"], validate=True)
        except (binascii.Error, TypeError) as e:
            raise ExportFailedError(f"Export fileBase64 is not valid base64: {e}") from e
        return j.get("fileName") or default_name, content

    cd = resp.headers.get("Content-Disposition") or ""
    if "application/vnd" in ct or "application/octet-stream" in ct or "attachment" in cd.lower():
        if not resp.content:
            raise ExportFailedError("Export returned an empty file.")
        return export_filename(cd) or default_name, resp.content

    raise ExportFailedError(
        f"Export returned unexpected content-type {ct or 'n/a'}. "
        f"Body starts: {(resp.text or '')[:300]}"
    )


def build_out_name(store: str, start: date, end: date) -> str:
    """``order-details-<store_slug>-<start>_<end>.xlsx``."""
    return f"order-details-{slugify(store)}-{start.isoformat()}_{end.isoformat()}.xlsx"


# ------------------------- Source -------------------------
class PortalReportSource:
    """Fetch order rows by exporting the order-details report over HTTP.

    Args:
        config: Portal settings (base URL, credentials, store, paths, timeouts).
        session_factory: Builds the HTTP session; injected for tests.
    """

    requires_credentials = True

    def __init__(
        self,
        config: ReportConfig,
        session_factory: Callable[[ReportConfig], requests.Session] | None = None,
    ) -> None:
        self.config = config
        self._session_factory = session_factory or (
            lambda cfg: make_session(cfg.http_timeout, cfg.http_retries)
        )

    def fetch_orders(
        self,
        time_range: TimeRange,
        store: str,
        progress: Optional[ProgressCallback] = None,
    ) -> list[OrderRecord]:
        self.config.require_credentials()
        base_url = (self.config.base_url or "").rstrip("/")
        s = self._session_factory(self.config)
        try:
            path = self._export(s, base_url, time_range, store, progress)
        except requests.RequestException as e:
            raise SourceUnavailableError(f"Portal request failed: {e}") from e
        finally:
            s.close()

        report_progress(progress, Stage.PROCESSING, f"Processing Excel file {path.name}")
        return load_orders(path)

    def _export(
        self,
        s: requests.Session,
        base_url: str,
        time_range: TimeRange,
        store: str,
        progress: Optional[ProgressCallback],
    ) -> Path:
        cfg = self.config
        report_progress(progress, Stage.NAVIGATING, "Navigating to the portal...")
        report_progress(progress, Stage.LOGGING_IN, "Logging in...")
        page = login_if_needed(
            s, base_url, cfg.username, cfg.password, cfg.report_path, cfg.logon_path
        )

        report_progress(progress, Stage.NAVIGATING_TO_REPORTING, "Navigating to Order Details...")
        if page.status_code != 200:
            raise SourceUnavailableError(
                f"Failed to open the order-details page. HTTP {page.status_code}"
            )
        token = get_csrf_from_html(page.text)
        if not token:
            logger.debug("No anti-forgery token on %s", page.url)

        report_progress(progress, Stage.SELECTING_STORE, f"Selecting store {store}...")
        store_id = cfg.store_id or resolve_store_id(page.text, store)
        if not store_id:
            raise ExportFailedError(f"Store {store!r} not offered by the order-details report.")

        start = time_range.start.date()
        end = time_range.end.date()
        form = {
            "storeIds": store_id,
            "startDate": start.isoformat(),
            # the portal treats the end date as exclusive
            "endDate": (end + timedelta(days=1)).isoformat(),
        }
        headers = {
            "Origin": _origin_for(base_url),
            "Referer": page.url,
            "X-Requested-With": "XMLHttpRequest",
            "Accept": "*/*",
        }
        if token:
            form[TOKEN_NAME] = token
            headers[TOKEN_HEADER] = token

        report_progress(progress, Stage.RUNNING_REPORT, "Running report...")
        run = s.post(f"{base_url}{cfg.run_path}", data=form, headers=headers)
        if run.status_code == 401:
            raise SourceUnavailableError("401 Unauthorized on report run; session lost.")
        if not (200 <= run.status_code < 300):
            logger.warning("Report run returned %s", run.status_code)

        report_progress(progress, Stage.EXPORTING, "Exporting to Excel...")
        r = s.post(
            f"{base_url}{cfg.export_path}",
            data=dict(form, format="xlsx"),
            headers=headers,
            timeout=cfg.export_wait,
        )
        if r.status_code == 401:
            raise SourceUnavailableError("401 Unauthorized on export; auth expired.")
        if not (200 <= r.status_code < 300):
            raise ExportFailedError(f"Export failed. HTTP {r.status_code}: {(r.text or '')[:200]}")

        out_name = build_out_name(store, start, end)
        suggested, blob = decode_export_response(r, out_name)
        out_path = cfg.download_dir / out_name
        try:
            cfg.download_dir.mkdir(parents=True, exist_ok=True)
            out_path.write_bytes(blob)
        except OSError as e:
            raise ExportFailedError(f"Could not save export to {out_path}: {e}") from e
        logger.info("Saved %s (%d bytes, portal name %s)", out_path, len(blob), suggested)
        return out_path
