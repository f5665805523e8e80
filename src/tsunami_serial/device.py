"""Connection object for a Tsunami WAV player.

Tsunami is a polyphonic WAV player with 4 stereo (or 8 mono) outputs. The
host drives it with fixed-layout command frames; with reporting enabled the
board sends a report whenever a track starts or stops.

Nothing reads the port in the background. Every query that depends on the
device's state first drains whatever is buffered on the port, so answers
reflect only what has arrived by the time of the call.
"""

from __future__ import annotations

import logging
from typing import Optional

from .exceptions import BadFramingError, TransportReadError, TransportWriteError
from .models.state import PeripheralState
from .protocol.commands import (
    build_get_system_info,
    build_get_version,
    build_master_volume,
    build_resume_all_sync,
    build_samplerate_offset,
    build_set_input_mix,
    build_set_midi_bank,
    build_set_reporting,
    build_set_trigger_bank,
    build_stop_all,
    build_track_fade,
    build_track_load,
    build_track_loop,
    build_track_pause,
    build_track_play_poly,
    build_track_play_solo,
    build_track_resume,
    build_track_stop,
    build_track_volume,
)
from .protocol.parser import Event, parse_response
from .protocol.reframer import Reframer
from .transport.serial_connection import (
    BAUD_RATE,
    READ_TIMEOUT_S,
    SerialConnection,
    Transport,
)

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 50
MAX_READS_PER_DRAIN = 64


class Tsunami:
    """A serial connection to one Tsunami board.

    Usage::

        with Tsunami("/dev/ttyUSB0") as ts:
            ts.start()
            ts.set_reporting(True)
            ts.track_play_solo(1, out=0)
            if ts.is_track_playing(1):
                ...

    Not thread-safe: callers sharing one instance must serialize access.
    """

    def __init__(
        self,
        port: Optional[str] = None,
        transport: Optional[Transport] = None,
        baudrate: int = BAUD_RATE,
        read_timeout: float = READ_TIMEOUT_S,
    ) -> None:
        if transport is None:
            if port is None:
                raise ValueError("Either a port name or a transport is required")
            transport = SerialConnection(
                port, baudrate=baudrate, read_timeout=read_timeout
            )
        self._transport = transport
        self._state = PeripheralState()
        self._reframer = Reframer()

    def __enter__(self) -> Tsunami:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def state(self) -> PeripheralState:
        return self._state

    @property
    def reframer(self) -> Reframer:
        return self._reframer

    @property
    def last_framing_error(self) -> BadFramingError | None:
        return self._reframer.last_error

    # ─── LIFECYCLE ────────────────────────────────────────────────────

    def open(self) -> None:
        """Open the transport (if it needs opening) and clear known state.

        Raises:
            TransportOpenError: If the port cannot be opened.
        """
        opener = getattr(self._transport, "open", None)
        if opener is not None:
            opener()
        self._state.reset()
        self._reframer.reset()

    def start(self) -> None:
        """Ask the board for its version string and system info.

        The answers arrive asynchronously and are picked up by the next
        drain.
        """
        self._write(build_get_version())
        self._write(build_get_system_info())

    def close(self) -> None:
        self._transport.close()
        self._reframer.reset()

    # ─── INBOUND ──────────────────────────────────────────────────────

    def update(self) -> list[Event]:
        """Drain buffered bytes from the port and apply every complete frame.

        Reads stop at the first empty read, or after ``MAX_READS_PER_DRAIN``
        reads. A read error ends the drain quietly; framing errors are
        logged and parsing carries on with the following bytes.

        Returns:
            The events applied to :attr:`state`, in arrival order.
        """
        events: list[Event] = []
        for _ in range(MAX_READS_PER_DRAIN):
            try:
                data = self._transport.read_available(READ_CHUNK_SIZE)
            except TransportReadError as e:
                logger.debug("Read error ends drain: %s", e)
                break
            if not data:
                break

            for frame in self._reframer.feed(data):
                event = parse_response(frame)
                self._state.apply(event)
                events.append(event)
        return events

    def is_track_playing(self, track: int) -> bool:
        """Whether ``track`` occupies a voice, as far as reports have told us.

        Only meaningful once reporting is enabled with :meth:`set_reporting`.
        """
        self.update()
        return self._state.is_track_playing(track)

    def get_version(self) -> str:
        """The board's version string, or ``""`` if none has arrived yet."""
        self.update()
        return self._state.version_string

    def get_num_tracks(self) -> int:
        self.update()
        return self._state.num_tracks

    def get_num_voices(self) -> int:
        self.update()
        return self._state.num_voices

    # ─── OUTBOUND ─────────────────────────────────────────────────────

    def _write(self, frame: bytes) -> None:
        logger.debug("TX %s", frame.hex(" "))
        written = self._transport.write_all(frame)
        if written != len(frame):
            raise TransportWriteError(
                f"Short write: {written} of {len(frame)} bytes"
            )

    def request_version(self) -> None:
        self._write(build_get_version())

    def request_system_info(self) -> None:
        self._write(build_get_system_info())

    def master_gain(self, out: int, gain: int) -> None:
        """Set the gain of a stereo output, -70 to +4 dB."""
        self._write(build_master_volume(out, gain))

    def set_reporting(self, enable: bool) -> None:
        """Enable or disable track start/stop reports from the board."""
        self._write(build_set_reporting(enable))

    def set_trigger_bank(self, bank: int) -> None:
        """Offset trigger-to-track mapping by 16 tracks per bank (1-32)."""
        self._write(build_set_trigger_bank(bank))

    def set_input_mix(self, mix: int) -> None:
        """Route the audio input into the output pairs set in ``mix``."""
        self._write(build_set_input_mix(mix))

    def set_midi_bank(self, bank: int) -> None:
        """Offset MIDI note-to-track mapping by 128 tracks per bank (1-32)."""
        self._write(build_set_midi_bank(bank))

    def samplerate_offset(self, offset: int) -> None:
        self._write(build_samplerate_offset(offset))

    def track_play_solo(self, track: int, out: int = 0, lock: bool = False) -> None:
        """Stop everything else and play ``track`` from the beginning."""
        self._write(build_track_play_solo(track, out, lock))

    def track_play_poly(self, track: int, out: int = 0, lock: bool = False) -> None:
        """Play ``track`` from the beginning, mixed with whatever is playing."""
        self._write(build_track_play_poly(track, out, lock))

    def track_load(self, track: int, out: int = 0, lock: bool = False) -> None:
        """Load ``track`` paused at its start; see :meth:`resume_all_in_sync`."""
        self._write(build_track_load(track, out, lock))

    def track_stop(self, track: int) -> None:
        self._write(build_track_stop(track))

    def track_pause(self, track: int) -> None:
        self._write(build_track_pause(track))

    def track_resume(self, track: int) -> None:
        self._write(build_track_resume(track))

    def track_loop(self, track: int, enable: bool) -> None:
        self._write(build_track_loop(track, enable))

    def track_gain(self, track: int, gain: int) -> None:
        """Set the gain of ``track``, -70 to +10 dB, taking effect at once."""
        self._write(build_track_volume(track, gain))

    def track_fade(
        self, track: int, gain: int, duration_ms: int, stop: bool = False
    ) -> None:
        """Fade ``track`` to ``gain`` over ``duration_ms``, optionally stopping it."""
        self._write(build_track_fade(track, gain, duration_ms, stop))

    def stop_all_tracks(self) -> None:
        self._write(build_stop_all())

    def resume_all_in_sync(self) -> None:
        """Un-pause every loaded track within the same audio buffer."""
        self._write(build_resume_all_sync())
