"""Report delivery targets."""

from __future__ import annotations

import abc

import httpx

from monit.errors import DeliveryError

JSON_HEADERS = {"Content-Type": "application/json"}


class Sink(abc.ABC):
    @abc.abstractmethod
    def send(self, body: bytes) -> None:
        """Deliver one serialized report. Raises DeliveryError on failure."""

    def close(self) -> None:
        """Release transport resources (optional override)."""


def build_client(verify_tls: bool = True, timeout: float = 10.0) -> httpx.Client:
    """Build an HTTP client that can be shared across several monitors."""
    return httpx.Client(verify=verify_tls, timeout=timeout)


class HttpSink(Sink):
    def __init__(
        self,
        url: str,
        client: httpx.Client | None = None,
        verify_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._url = url
        self._owns_client = client is None
        self._client = client or build_client(verify_tls, timeout)

    @property
    def url(self) -> str:
        return self._url

    def send(self, body: bytes) -> None:
        try:
            resp = self._client.post(self._url, content=body, headers=JSON_HEADERS)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DeliveryError(f"{self._url} responded {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise DeliveryError(f"POST {self._url} failed: {e!r}") from e

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
