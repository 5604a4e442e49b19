"""Tests for the command line entry point."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from mongo_warehouse import cli
from mongo_warehouse.core.errors import ConnectionTimeoutError


@pytest.fixture(autouse=True)
def quiet_cli(monkeypatch):
    monkeypatch.setattr(cli, "install_shutdown_handlers", lambda: None)
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_drop_database_command_passes_connection_options(monkeypatch, capsys):
    drop = MagicMock()
    monkeypatch.setattr(cli, "drop_database", drop)

    cli.main(["drop-database", "scratch", "--host", "db.example", "--port", "27100", "--timeout", "5"])

    drop.assert_called_once_with("scratch", "db.example", 27100, 5.0)
    assert "scratch" in capsys.readouterr().out


def test_message_type_command_prints_type_and_closes(monkeypatch, capsys):
    client = MagicMock()
    monkeypatch.setattr(cli, "make_connection", MagicMock(return_value=client))
    monkeypatch.setattr(cli, "message_type", MagicMock(return_value="sensor_msgs/Image"))

    cli.main(["message-type", "warehouse", "images"])

    assert capsys.readouterr().out.strip() == "sensor_msgs/Image"
    cli.message_type.assert_called_once_with(client, "warehouse", "images")
    client.close.assert_called_once()


def test_register_type_command(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(cli, "make_connection", MagicMock(return_value=client))
    register = MagicMock()
    monkeypatch.setattr(cli, "register_message_type", register)

    cli.main(["register-type", "warehouse", "images", "sensor_msgs/Image", "--md5sum", "abc"])

    register.assert_called_once_with(client, "warehouse", "images", "sensor_msgs/Image", "abc")
    client.close.assert_called_once()


def test_connection_timeout_exits_with_status_one(monkeypatch):
    monkeypatch.setattr(
        cli, "make_connection", MagicMock(side_effect=ConnectionTimeoutError("localhost:27017", 2.0))
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["ping", "--timeout", "2"])
    assert excinfo.value.code == 1


def test_invalid_settings_exit_with_status_one():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["ping", "--port", "70000", "--timeout", "1"])
    assert excinfo.value.code == 1
