"""
CaseHub REST gateway for test runs.

Every call the execution screen makes goes through this class: fetch a
run, save status / step patches, delete an attachment file.

Testability: pass a mock ``session`` to TestRunGateway() in tests instead
of letting it create a real requests.Session internally.
"""

from __future__ import annotations

import logging
import time

import requests

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10


class GatewayError(Exception):
    """Raised for transport failures and non-2xx responses.

    Attributes:
        status_code: HTTP status, or None when no response was received.
        message:     The server's ``error`` text when present.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message if status_code is None else f"{status_code}: {message}")


def _error_text(resp) -> str:
    """The server's ``error`` field when the body carries one, else the reason phrase."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return resp.reason or "Request failed"


class TestRunGateway:
    """Thin wrapper over the /api/v1 test run and attachment endpoints.

    Usage:
        gateway = TestRunGateway("http://localhost:5000")
        run = gateway.get_run("TR-3")
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        base_url: str,
        session: requests.Session | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: requests.Session | None = session

    @property
    def session(self) -> requests.Session:
        """Return (or lazily create) the requests.Session."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}/api/v1{path}"
        t0 = time.perf_counter()
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise GatewayError(str(exc)) from exc
        duration_ms = int((time.perf_counter() - t0) * 1000)

        if not 200 <= resp.status_code < 300:
            message = _error_text(resp)
            logger.info("%s %s → %s (%dms)", method, path, resp.status_code, duration_ms)
            raise GatewayError(message, status_code=resp.status_code)

        logger.debug("%s %s → %s (%dms)", method, path, resp.status_code, duration_ms)
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            logger.warning("%s %s returned a body that is not JSON", method, path)
            raise GatewayError("Response body is not valid JSON", status_code=resp.status_code) from exc

    def get_run(self, run_id) -> dict:
        return self._request("GET", f"/test-runs/{run_id}")

    def update_run(self, run_id, payload: dict) -> dict:
        """PUT status and/or step patches; returns the reloaded run."""
        return self._request("PUT", f"/test-runs/{run_id}", json=payload)

    def delete_attachment(self, attachment_id: str) -> None:
        self._request("DELETE", f"/attachments/{attachment_id}")
