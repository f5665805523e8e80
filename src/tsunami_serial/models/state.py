"""Host-side view of the peripheral: voice table, version and counts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..protocol.parser import (
    VERSION_STRING_LEN,
    Event,
    SystemInfo,
    TrackReport,
    VersionString,
)

logger = logging.getLogger(__name__)

MAX_NUM_VOICES = 18
UNASSIGNED = 0xFFFF


def _empty_voice_table() -> list[int]:
    return [UNASSIGNED] * MAX_NUM_VOICES


@dataclass
class PeripheralState:
    """Last-known peripheral state, updated only by decoded responses.

    Each connection owns its own instance.
    """

    voice_table: list[int] = field(default_factory=_empty_voice_table)
    version: bytes = bytes(VERSION_STRING_LEN)
    version_received: bool = False
    num_voices: int = 0
    num_tracks: int = 0
    sysinfo_received: bool = False

    def reset(self) -> None:
        """Forget everything learned from the device."""
        self.voice_table = _empty_voice_table()
        self.version = bytes(VERSION_STRING_LEN)
        self.version_received = False
        self.num_voices = 0
        self.num_tracks = 0
        self.sysinfo_received = False

    @property
    def version_string(self) -> str:
        """The received version text, or an empty string."""
        if not self.version_received:
            return ""
        text = self.version.split(b"\x00")[0]
        return text.decode("ascii", errors="replace").strip()

    def apply(self, event: Event) -> None:
        """Update the state from a decoded response.

        Unrecognized events leave the state untouched.
        """
        if isinstance(event, TrackReport):
            self._apply_track_report(event)
        elif isinstance(event, VersionString):
            self.version = event.raw
            self.version_received = True
            logger.info("Device version: %s", event.version)
        elif isinstance(event, SystemInfo):
            self.num_voices = event.num_voices
            self.num_tracks = event.num_tracks
            self.sysinfo_received = True
            logger.info(
                "Device system info: %d voices, %d tracks",
                event.num_voices,
                event.num_tracks,
            )

    def _apply_track_report(self, report: TrackReport) -> None:
        if not 0 <= report.voice < MAX_NUM_VOICES:
            return

        if report.started:
            self.voice_table[report.voice] = report.track
        elif self.voice_table[report.voice] == report.track:
            # a stop for a track no longer in this voice is stale
            self.voice_table[report.voice] = UNASSIGNED

    def is_track_playing(self, track: int) -> bool:
        """True if any voice is currently assigned ``track``."""
        if track == UNASSIGNED:
            return False
        return track in self.voice_table

    def playing_tracks(self) -> list[int]:
        """Tracks currently assigned to a voice, in voice order."""
        return [t for t in self.voice_table if t != UNASSIGNED]
