"""Serial UART connection to a Tsunami board.

The board talks 8N1 at 57600 baud over its serial header or a USB-serial
adapter. Reads use a short timeout so a drain never stalls for long when
the device has nothing to say.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import serial
import serial.tools.list_ports

from ..exceptions import TransportOpenError, TransportReadError, TransportWriteError

logger = logging.getLogger(__name__)

BAUD_RATE = 57600
READ_TIMEOUT_S = 0.005
WRITE_TIMEOUT_S = 1.0


class Transport(Protocol):
    """What the connection object needs from a byte transport."""

    def read_available(self, size: int) -> bytes: ...

    def write_all(self, data: bytes) -> int: ...

    def close(self) -> None: ...


@dataclass
class PortInfo:
    """Serial port identification from the OS."""

    port: str
    description: str = ""
    hwid: str = ""


def find_ports() -> list[PortInfo]:
    """List the serial ports present on this machine."""
    return [
        PortInfo(port=p.device, description=p.description or "", hwid=p.hwid or "")
        for p in serial.tools.list_ports.comports()
    ]


class SerialConnection:
    """Manages the serial port used to talk to the board.

    Usage::

        conn = SerialConnection("/dev/ttyUSB0")
        conn.open()
        conn.write_all(frame_bytes)
        data = conn.read_available(50)
        conn.close()
    """

    def __init__(
        self,
        port: str,
        baudrate: int = BAUD_RATE,
        read_timeout: float = READ_TIMEOUT_S,
        write_timeout: float = WRITE_TIMEOUT_S,
    ) -> None:
        self._port_name = port
        self._baudrate = baudrate
        self._read_timeout = read_timeout
        self._write_timeout = write_timeout
        self._serial: serial.Serial | None = None
        self._port_info = PortInfo(port=port)

    @property
    def connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    @property
    def port_info(self) -> PortInfo:
        return self._port_info

    def open(self) -> PortInfo:
        """Open the serial port.

        Returns:
            PortInfo for the opened port.

        Raises:
            TransportOpenError: If the port cannot be opened.
        """
        if self.connected:
            return self._port_info

        try:
            self._serial = serial.Serial(
                port=self._port_name,
                baudrate=self._baudrate,
                timeout=self._read_timeout,
                write_timeout=self._write_timeout,
            )
        except (OSError, serial.SerialException) as e:
            raise TransportOpenError(
                f"Could not open serial port {self._port_name!r} "
                f"at {self._baudrate} baud: {e}"
            ) from e

        for info in find_ports():
            if info.port == self._port_name:
                self._port_info = info
                break

        logger.info("Opened %s at %d baud", self._port_name, self._baudrate)
        return self._port_info

    def close(self) -> None:
        """Close the serial port."""
        if self._serial is None:
            return

        try:
            self._serial.close()
        except (OSError, serial.SerialException) as e:
            logger.warning("Error closing serial port: %s", e)
        finally:
            self._serial = None
            logger.info("Closed %s", self._port_name)

    def write_all(self, data: bytes) -> int:
        """Write a whole frame to the port.

        Returns:
            Number of bytes written, always ``len(data)``.

        Raises:
            TransportWriteError: If not open, the write fails, or only part
                of ``data`` was sent.
        """
        if not self.connected:
            raise TransportWriteError("Serial port is not open")

        try:
            written = self._serial.write(data)
        except (OSError, serial.SerialException) as e:
            raise TransportWriteError(f"Serial write failed: {e}") from e

        if written != len(data):
            raise TransportWriteError(
                f"Short write: {written} of {len(data)} bytes"
            )
        return written

    def read_available(self, size: int) -> bytes:
        """Read up to ``size`` bytes, waiting at most the read timeout.

        Returns:
            The bytes read; empty when nothing arrived in time.

        Raises:
            TransportReadError: If not open or the read fails.
        """
        if not self.connected:
            raise TransportReadError("Serial port is not open")

        try:
            return bytes(self._serial.read(size))
        except (OSError, serial.SerialException) as e:
            raise TransportReadError(f"Serial read failed: {e}") from e
