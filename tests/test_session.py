"""Tests for SSH session establishment."""

from unittest.mock import MagicMock

import paramiko
import pytest

from sftpdeploy.config.models import ConnectionRetryConfig, SFTPConfig
from sftpdeploy.sftp.errors import TransferConnectionError
from sftpdeploy.sftp.session import SessionManager


CONFIG = SFTPConfig(host="deploy.example.com", port=22, username="deploy", password="secret")


class TestSessionManager:
    """Tests for SessionManager."""

    def test_connect_and_close(self) -> None:
        """Should yield a connected client and close it afterwards."""
        client = MagicMock()
        manager = SessionManager(client_factory=lambda: client)

        with manager.connect(CONFIG) as session:
            assert session is client

        client.connect.assert_called_once()
        assert client.connect.call_args.kwargs["hostname"] == "deploy.example.com"
        client.close.assert_called_once()

    def test_retries_then_succeeds(self) -> None:
        """Should retry connection failures."""
        failing, working = MagicMock(), MagicMock()
        failing.connect.side_effect = paramiko.SSHException("Error reading SSH protocol banner")
        clients = iter([failing, working])
        manager = SessionManager(ConnectionRetryConfig(max_retries=2, retry_delay=0),
                                 client_factory=lambda: next(clients))

        with manager.connect(CONFIG) as session:
            assert session is working

        failing.close.assert_called_once()

    def test_gives_up(self) -> None:
        """Should raise a connection error after the last attempt."""
        client = MagicMock()
        client.connect.side_effect = OSError("Connection refused")
        manager = SessionManager(ConnectionRetryConfig(max_retries=2, retry_delay=0),
                                 client_factory=lambda: client)

        with pytest.raises(TransferConnectionError, match="after 2 attempts") as exc_info:
            with manager.connect(CONFIG):
                pass

        assert client.connect.call_count == 2
        assert isinstance(exc_info.value.cause, OSError)
