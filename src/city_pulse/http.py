"""Shared HTTP session and upstream error classification."""

from __future__ import annotations

from requests import RequestException, Session
from requests.adapters import HTTPAdapter
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import Timeout
from urllib3.util.retry import Retry


class UpstreamError(Exception):
    """A provider call failed; the message is already classified for display."""

    def __init__(self, service: str, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.service = service
        self.status_code = status_code


def create_session(
    retries: int = 0,
    backoff_factor: float = 0.0,
    status_forcelist: tuple[int, ...] = (429, 500, 502, 503, 504),
) -> Session:
    """Create a requests Session mounted with a urllib3 Retry adapter.

    The default performs no retries: a failed provider call is reported
    once and the caller substitutes a default.
    """
    retry = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=status_forcelist,
        allowed_methods=["GET"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session = Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def classify_request_error(exc: RequestException, service_name: str) -> str:
    """Turn a requests exception into ``HTTP <code>``/``Network error``/``Request error``."""
    response = getattr(exc, "response", None)
    if response is not None:
        detail = "Unknown error"
        try:
            body = response.json()
            if isinstance(body, dict) and body.get("message"):
                detail = str(body["message"])
        except ValueError:
            pass
        return f"HTTP {response.status_code}: {detail}"
    unreachable = isinstance(exc, (RequestsConnectionError, Timeout))
    if unreachable or getattr(exc, "request", None) is not None:
        return f"Network error: Unable to reach {service_name}"
    return f"Request error: {exc}"


def get_json(
    session: Session,
    url: str,
    params: dict,
    timeout: float,
    service: str,
    service_name: str,
) -> dict:
    """GET *url* and return the decoded JSON body, raising UpstreamError on failure."""
    try:
        resp = session.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except RequestException as exc:
        response = getattr(exc, "response", None)
        raise UpstreamError(
            service,
            classify_request_error(exc, service_name),
            status_code=response.status_code if response is not None else None,
        ) from exc
    except ValueError as exc:
        raise UpstreamError(service, f"Request error: invalid JSON ({exc})") from exc
