from __future__ import annotations

from functools import lru_cache
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import RemoteError
from .logging_setup import get_correlation_id, get_logger
from .settings import settings

logger = get_logger("http")


def default_timeout() -> tuple[float, float]:
    """Prazo (conexão, leitura) aplicado a toda chamada remota."""
    return (settings.HTTP_CONNECT_TIMEOUT, settings.HTTP_READ_TIMEOUT)


def _build_session() -> requests.Session:
    s = requests.Session()
    s.headers.update(
        {
            "User-Agent": "tracking-sync/HTTPClient",
            "Accept": "application/json, */*;q=0.1",
        }
    )
    # nenhuma re-tentativa: falha remota vira falha da linha
    adapter = HTTPAdapter(max_retries=Retry(total=0, raise_on_status=False), pool_connections=10, pool_maxsize=10)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    return s


@lru_cache(maxsize=1)
def _get_cached_session() -> requests.Session:
    return _build_session()


def get_session(session: requests.Session | None = None) -> requests.Session:
    return session or _get_cached_session()


def _request_with_handling(method: str, url: str, **kwargs: Any) -> requests.Response:
    timeout = kwargs.pop("timeout", None) or default_timeout()
    session: requests.Session = kwargs.pop("session", None) or get_session()

    headers = kwargs.pop("headers", {}) or {}
    headers = {**session.headers, **headers}
    headers.setdefault("X-Correlation-ID", get_correlation_id())
    kwargs["headers"] = headers

    try:
        res = session.request(method, url, timeout=timeout, **kwargs)
        res.raise_for_status()
        logger.debug("HTTP %s OK", method, extra={"url": url, "status": res.status_code})
        return res

    except requests.Timeout as e:
        logger.warning("HTTP %s timeout", method, extra={"url": url})
        raise RemoteError(
            f"Timeout calling {url}",
            code="HTTP_TIMEOUT",
            cause=e,
            data={"url": url},
        ) from e

    except requests.HTTPError as e:
        status = getattr(e.response, "status_code", None)
        logger.error("HTTP %s error", method, extra={"url": url, "status": status})
        raise RemoteError(
            f"HTTP {status} calling {url}",
            code="HTTP_ERROR",
            cause=e,
            data={"url": url, "status": status, "text": getattr(e.response, "text", None)},
        ) from e

    except requests.RequestException as e:
        logger.error("HTTP %s request exception", method, extra={"url": url})
        raise RemoteError(
            f"Network error calling {url}: {e}",
            code="HTTP_REQUEST_ERROR",
            cause=e,
            data={"url": url},
        ) from e


def http_post(url: str, **kwargs: Any) -> requests.Response:
    return _request_with_handling("POST", url, **kwargs)
