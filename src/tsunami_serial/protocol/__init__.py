"""Protocol layer: message framing, command builders, response parsing and reframing."""

from .framing import Frame, build_frame, parse_frame
from .commands import Command, build_command
from .parser import Response, parse_response
from .reframer import Reframer
