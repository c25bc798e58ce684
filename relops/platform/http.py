"""Minimal HTTP client for webhook delivery.

:class:`HttpClient` is a protocol so tests inject a recording fake instead of
touching the network.
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from relops.core.result import Err, Ok, Result

__all__ = ["HttpClient", "HttpError", "UrllibHttpClient"]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP failure.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    def post_json(self, url: str, payload: object) -> Result[int, HttpError]:
        """POST ``payload`` as JSON; Ok(status) for 2xx responses."""
        ...


class UrllibHttpClient:
    def __init__(self, timeout: float = 30.0, user_agent: str = "relops") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def post_json(self, url: str, payload: object) -> Result[int, HttpError]:
        data = json.dumps(payload).encode("utf-8")
        req = urllib.request.Request(
            url,
            data=data,
            method="POST",
            headers={"User-Agent": self.user_agent, "Content-Type": "application/json"},
        )
        try:
            with urllib.request.urlopen(
                req, timeout=self.timeout, context=self._ssl_context
            ) as response:
                return Ok(int(response.status))
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
