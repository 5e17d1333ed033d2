from abc import ABC

import httpx

from actnames import __version__


class ActNamesError(Exception):
    """Base class for failures talking to the upstream services."""


class Source(ABC):
    """An upstream HTTP service.

    A fresh ``httpx.AsyncClient`` is opened per operation; ``transport`` lets
    tests swap in an ``httpx.MockTransport``.
    """

    name: str

    def __init__(self, timeout: float, transport: httpx.AsyncBaseTransport | None = None):
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
            headers={"Accept": "application/json", "User-Agent": f"actnames/{__version__} ({self.name})"},
            follow_redirects=True,
        )
