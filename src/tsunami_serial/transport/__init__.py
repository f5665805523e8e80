"""Byte transports for talking to the device."""

from .serial_connection import PortInfo, SerialConnection, Transport, find_ports
