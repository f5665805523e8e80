"""Host-side serial control library for Tsunami WAV players."""

from .device import Tsunami
from .exceptions import (
    BadFramingError,
    TransportError,
    TransportOpenError,
    TransportReadError,
    TransportWriteError,
    TsunamiError,
)
from .models.state import PeripheralState
from .protocol.commands import InputMix, TrackControl
