"""Shared fixtures for unit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import ovh.exceptions
import pytest

from iplb_provisioner.config import load
from iplb_provisioner.core.client import RemoteResourceClient

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from iplb_provisioner.config.schema import Config

_OVH_ENV_VARS = (
    "OVH_ENDPOINT",
    "OVH_APPLICATION_KEY",
    "OVH_APPLICATION_SECRET",
    "OVH_CONSUMER_KEY",
    "IPLB_LOG",
)

_FRONTEND_DEFAULTS: dict[str, Any] = {
    "allowedSource": [],
    "dedicatedIpfo": [],
    "defaultFarmId": None,
    "defaultSslId": None,
    "disabled": False,
    "ssl": False,
    "displayName": None,
}


class FakeTransport:
    """In-memory stand-in for ``ovh.Client`` serving TCP frontends.

    Records every call as ``(verb, path, body)``.
    """

    def __init__(self) -> None:
        self.frontends: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.fail_on: set[str] = set()
        # Fields the server rewrites in its POST response.
        self.overrides: dict[str, Any] = {}
        self._next_id = 1

    def _record(self, verb: str, path: str, body: dict[str, Any]) -> None:
        self.calls.append((verb, path, body))
        if verb in self.fail_on:
            raise ovh.exceptions.HTTPError("500 Internal Server Error")

    def _lookup(self, path: str) -> dict[str, Any]:
        try:
            return self.frontends[path]
        except KeyError:
            raise ovh.exceptions.ResourceNotFoundError("This frontend does not exist") from None

    def get(self, _target: str, _need_auth: bool = True, **kwargs: Any) -> Any:
        self._record("GET", _target, kwargs)
        return dict(self._lookup(_target))

    def post(self, _target: str, _need_auth: bool = True, **kwargs: Any) -> Any:
        self._record("POST", _target, kwargs)
        frontend_id = self._next_id
        self._next_id += 1
        body = {**_FRONTEND_DEFAULTS, **kwargs, **self.overrides, "frontendId": frontend_id}
        self.frontends[f"{_target}/{frontend_id}"] = body
        return dict(body)

    def put(self, _target: str, _need_auth: bool = True, **kwargs: Any) -> Any:
        self._record("PUT", _target, kwargs)
        self._lookup(_target).update(kwargs)
        return None

    def delete(self, _target: str, _need_auth: bool = True, **kwargs: Any) -> Any:
        self._record("DELETE", _target, kwargs)
        self._lookup(_target)
        del self.frontends[_target]
        return None

    def verbs(self) -> list[str]:
        return [verb for verb, _, _ in self.calls]


@pytest.fixture(autouse=True)
def _clean_ovh_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove OVH_* env vars so unit tests don't leak real credentials."""
    for var in _OVH_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> RemoteResourceClient:
    return RemoteResourceClient(transport)


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    """Factory fixture: write YAML + optional .env, return loaded Config."""

    def _make(yaml_str: str, *, dotenv: str | None = None) -> Config:
        (tmp_path / "config.yaml").write_text(yaml_str)
        if dotenv is not None:
            (tmp_path / ".env").write_text(dotenv)
        return load(tmp_path / "config.yaml")

    return _make
