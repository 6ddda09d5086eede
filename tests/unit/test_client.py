"""Tests for the RemoteResourceClient."""

from __future__ import annotations

from unittest.mock import MagicMock

import ovh.exceptions
import pytest

from iplb_provisioner.core.client import RemoteResourceClient
from iplb_provisioner.engine.errors import NotFoundError, RemoteError

_PATH = "/ipLoadbalancing/lb-1/tcp/frontend"


@pytest.fixture
def mock_transport() -> MagicMock:
    return MagicMock()


@pytest.fixture
def remote(mock_transport: MagicMock) -> RemoteResourceClient:
    return RemoteResourceClient(mock_transport)


class TestVerbs:
    def test_get_returns_decoded_body(
        self, remote: RemoteResourceClient, mock_transport: MagicMock
    ) -> None:
        mock_transport.get.return_value = {"frontendId": 7, "port": "80"}

        assert remote.get(f"{_PATH}/7") == {"frontendId": 7, "port": "80"}
        mock_transport.get.assert_called_once_with(f"{_PATH}/7")

    def test_post_sends_body_as_json_fields(
        self, remote: RemoteResourceClient, mock_transport: MagicMock
    ) -> None:
        mock_transport.post.return_value = {"frontendId": 1}

        result = remote.post(_PATH, {"port": "80", "allowedSource": ["1.2.3.0/24"]})

        assert result == {"frontendId": 1}
        mock_transport.post.assert_called_once_with(
            _PATH, port="80", allowedSource=["1.2.3.0/24"]
        )

    def test_put_without_response_body(
        self, remote: RemoteResourceClient, mock_transport: MagicMock
    ) -> None:
        mock_transport.put.return_value = None

        assert remote.put(f"{_PATH}/1", {"zone": "gra"}) is None
        mock_transport.put.assert_called_once_with(f"{_PATH}/1", zone="gra")

    def test_delete(self, remote: RemoteResourceClient, mock_transport: MagicMock) -> None:
        mock_transport.delete.return_value = None

        remote.delete(f"{_PATH}/1")

        mock_transport.delete.assert_called_once_with(f"{_PATH}/1")

    def test_single_attempt_per_call(
        self, remote: RemoteResourceClient, mock_transport: MagicMock
    ) -> None:
        mock_transport.get.side_effect = ovh.exceptions.NetworkError("connection reset")

        with pytest.raises(RemoteError):
            remote.get(_PATH)
        assert mock_transport.get.call_count == 1


class TestErrors:
    def test_404_becomes_not_found(
        self, remote: RemoteResourceClient, mock_transport: MagicMock
    ) -> None:
        mock_transport.get.side_effect = ovh.exceptions.ResourceNotFoundError("gone")

        with pytest.raises(NotFoundError) as excinfo:
            remote.get(f"{_PATH}/9")

        assert excinfo.value.status == 404
        assert excinfo.value.operation == "GET"
        assert excinfo.value.endpoint == f"{_PATH}/9"

    def test_api_error_becomes_remote_error(
        self, remote: RemoteResourceClient, mock_transport: MagicMock
    ) -> None:
        cause = ovh.exceptions.BadParametersError("Invalid port")
        mock_transport.post.side_effect = cause

        with pytest.raises(RemoteError) as excinfo:
            remote.post(_PATH, {"port": "x"})

        err = excinfo.value
        assert not isinstance(err, NotFoundError)
        assert err.operation == "POST"
        assert err.endpoint == _PATH
        assert "Invalid port" in str(err)
        assert err.__cause__ is cause

    def test_delete_404_is_not_suppressed(
        self, remote: RemoteResourceClient, mock_transport: MagicMock
    ) -> None:
        mock_transport.delete.side_effect = ovh.exceptions.ResourceNotFoundError("gone")

        with pytest.raises(NotFoundError):
            remote.delete(f"{_PATH}/1")

    def test_transport_failure(
        self, remote: RemoteResourceClient, mock_transport: MagicMock
    ) -> None:
        mock_transport.put.side_effect = ovh.exceptions.HTTPError("500 Internal Server Error")

        with pytest.raises(RemoteError, match=r"calling PUT .*/1: 500"):
            remote.put(f"{_PATH}/1", {})
