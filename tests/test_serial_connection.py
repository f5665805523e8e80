"""Tests for the pyserial-backed transport."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import serial

from tsunami_serial.exceptions import (
    TransportOpenError,
    TransportReadError,
    TransportWriteError,
)
from tsunami_serial.transport.serial_connection import (
    BAUD_RATE,
    READ_TIMEOUT_S,
    SerialConnection,
    find_ports,
)

MODULE = "tsunami_serial.transport.serial_connection"


def _port_entry(device="/dev/ttyUSB0"):
    return SimpleNamespace(device=device, description="FT232R", hwid="USB VID:PID=0403:6001")


@pytest.fixture
def mock_serial():
    """Patch serial.Serial with an open port that echoes write lengths."""
    port = MagicMock()
    port.is_open = True
    port.write.side_effect = lambda data: len(data)
    port.read.return_value = b""
    with patch(f"{MODULE}.serial.Serial", return_value=port) as cls, patch(
        f"{MODULE}.serial.tools.list_ports.comports", return_value=[_port_entry()]
    ):
        yield cls, port


def test_open_uses_board_defaults(mock_serial):
    cls, _ = mock_serial
    conn = SerialConnection("/dev/ttyUSB0")
    info = conn.open()
    assert conn.connected
    assert info.description == "FT232R"
    kwargs = cls.call_args.kwargs
    assert kwargs["baudrate"] == BAUD_RATE == 57600
    assert kwargs["timeout"] == READ_TIMEOUT_S


def test_open_failure_raises():
    with patch(f"{MODULE}.serial.Serial", side_effect=serial.SerialException("busy")):
        conn = SerialConnection("/dev/ttyUSB9")
        with pytest.raises(TransportOpenError) as excinfo:
            conn.open()
    assert "/dev/ttyUSB9" in str(excinfo.value)
    assert not conn.connected


def test_write_all(mock_serial):
    _, port = mock_serial
    conn = SerialConnection("/dev/ttyUSB0")
    conn.open()
    assert conn.write_all(b"\xF0\xAA\x05\x04\x55") == 5
    port.write.assert_called_once_with(b"\xF0\xAA\x05\x04\x55")


def test_short_write_raises(mock_serial):
    _, port = mock_serial
    port.write.side_effect = None
    port.write.return_value = 3
    conn = SerialConnection("/dev/ttyUSB0")
    conn.open()
    with pytest.raises(TransportWriteError):
        conn.write_all(b"\xF0\xAA\x05\x04\x55")


def test_write_error_raises(mock_serial):
    _, port = mock_serial
    port.write.side_effect = serial.SerialTimeoutException("timeout")
    conn = SerialConnection("/dev/ttyUSB0")
    conn.open()
    with pytest.raises(TransportWriteError):
        conn.write_all(b"\x00")


def test_write_when_closed_raises():
    with pytest.raises(TransportWriteError):
        SerialConnection("/dev/ttyUSB0").write_all(b"\x00")


def test_read_available(mock_serial):
    _, port = mock_serial
    port.read.return_value = b"\xF0\xAA"
    conn = SerialConnection("/dev/ttyUSB0")
    conn.open()
    assert conn.read_available(50) == b"\xF0\xAA"
    port.read.assert_called_once_with(50)


def test_read_error_raises(mock_serial):
    _, port = mock_serial
    port.read.side_effect = serial.SerialException("device reports readiness")
    conn = SerialConnection("/dev/ttyUSB0")
    conn.open()
    with pytest.raises(TransportReadError):
        conn.read_available(50)


def test_close(mock_serial):
    _, port = mock_serial
    conn = SerialConnection("/dev/ttyUSB0")
    conn.open()
    conn.close()
    port.close.assert_called_once()
    assert not conn.connected
    conn.close()  # second close is a no-op


def test_close_error_is_logged_not_raised(mock_serial, caplog):
    _, port = mock_serial
    port.close.side_effect = OSError("gone")
    conn = SerialConnection("/dev/ttyUSB0")
    conn.open()
    conn.close()
    assert not conn.connected
    assert "gone" in caplog.text


def test_find_ports():
    with patch(
        f"{MODULE}.serial.tools.list_ports.comports",
        return_value=[_port_entry("/dev/ttyACM0")],
    ):
        ports = find_ports()
    assert [p.port for p in ports] == ["/dev/ttyACM0"]
