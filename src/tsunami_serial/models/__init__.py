"""Data models for the host's view of the device."""

from .state import MAX_NUM_VOICES, UNASSIGNED, PeripheralState
