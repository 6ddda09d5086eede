"""Remote resource client over the OVH JSON API.

Wraps a transport shaped like ``ovh.Client`` and performs exactly one call per
method. API failures are translated into :class:`RemoteError`, with HTTP 404
surfaced as the :class:`NotFoundError` subclass so callers can treat a missing
resource as a regular outcome.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

import ovh.exceptions

from iplb_provisioner.engine.errors import NotFoundError, RemoteError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """The subset of ``ovh.Client`` used by :class:`RemoteResourceClient`."""

    def get(self, _target: str, _need_auth: bool = True, **kwargs: Any) -> Any: ...

    def post(self, _target: str, _need_auth: bool = True, **kwargs: Any) -> Any: ...

    def put(self, _target: str, _need_auth: bool = True, **kwargs: Any) -> Any: ...

    def delete(self, _target: str, _need_auth: bool = True, **kwargs: Any) -> Any: ...


class RemoteResourceClient:
    """Issue GET/POST/PUT/DELETE calls against resource paths."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    @property
    def transport(self) -> Transport:
        return self._transport

    def get(self, path: str) -> Any:
        """GET *path* and return the decoded body."""
        return self._call("GET", path, lambda: self._transport.get(path))

    def post(self, path: str, body: dict[str, Any]) -> Any:
        """POST *body* to *path* and return the decoded body (may be ``None``)."""
        return self._call("POST", path, lambda: self._transport.post(path, **body))

    def put(self, path: str, body: dict[str, Any]) -> Any:
        """PUT *body* to *path*. Update responses usually carry no body."""
        return self._call("PUT", path, lambda: self._transport.put(path, **body))

    def delete(self, path: str) -> Any:
        """DELETE *path*. A 404 is raised as :class:`NotFoundError`, never suppressed."""
        return self._call("DELETE", path, lambda: self._transport.delete(path))

    @staticmethod
    def _call(operation: str, path: str, send: Callable[[], Any]) -> Any:
        logger.debug("%s %s", operation, path)
        try:
            return send()
        except ovh.exceptions.ResourceNotFoundError as exc:
            raise NotFoundError(operation, path, str(exc)) from exc
        except ovh.exceptions.APIError as exc:
            raise RemoteError(operation, path, str(exc)) from exc
