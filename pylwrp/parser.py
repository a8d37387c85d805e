"""Parse LWRP response lines into typed response records.

A response line looks like::

    DST 5 NAME:"Studio A" ADDR:239.192.0.10 NCHN:2
    IP address 192.168.2.10 netmask 255.255.255.0 gateway 192.168.2.1 hostname node1
    MIX 3 1:10 -:- 2:5

The first word selects the record type, the rest is split into segments
(``split_segments``) and the ``KEY:VALUE`` segments are decoded into
attributes with readable names (``parse_attributes``).
"""

import logging
from typing import Callable

from pylwrp.responses import (
    IO_IN,
    IO_OUT,
    IO_UNKNOWN,
    Attributes,
    DestinationResponse,
    DeviceResponse,
    ErrorResponse,
    GpiResponse,
    GpoResponse,
    LevelAlertResponse,
    LwrpResponse,
    MatrixResponse,
    MatrixSrc,
    MeterResponse,
    NetworkResponse,
    SetResponse,
    SourceResponse,
)

logger = logging.getLogger(__name__)

TRUE = "true"
FALSE = "false"

UNKNOWN_PREFIX = "unknown_"

# Plain renames: wire key -> attribute name, value copied as is
ATTRIBUTE_NAMES = {
    "LWRP": "protocol_version",
    "DEVN": "device_name",
    "SYSV": "system_version",
    "NDST": "destination_count",
    "NGPI": "gpi_count",
    "NGPO": "gpo_count",
    "MIX": "matrix_channels",
    "ADIP": "advertisement_address",
    "IPCLK_ADDR": "clock_address",
    "NIC_IPADDR": "nic_address",
    "NIC_NAME": "nic_name",
    "PSNM": "name",
    "NAME": "name",
    "LWSA": "livestream_destination",
    "RTPA": "rtp_destination",
    "CMD": "command_text",
}

# Keys whose value is the following segment: "address 192.168.2.10"
LOOKAHEAD_ATTRIBUTE_NAMES = {
    "address": "ip_address",
    "netmask": "ip_netmask",
    "gateway": "ip_gateway",
    "hostname": "ip_hostname",
}

# Keys that carry a boolean by their presence, the device sends them bare
FLAG_ATTRIBUTES = {
    "CLIP": ("clip", TRUE),
    "NO-CLIP": ("clip", FALSE),
    "LOW": ("silence", TRUE),
    "NO-LOW": ("silence", FALSE),
}

# Keys with a "1"/"0" value rendered as a boolean
SWITCH_ATTRIBUTE_NAMES = {
    "MIXCFG": "matrix_enabled",
    "LWSE": "livestream",
    "RTPE": "rtp",
}

# Keys with a "left:right" value
PAIRED_ATTRIBUTE_NAMES = {
    "PEEK": ("peak_left", "peak_right"),
    "RMS": ("rms_left", "rms_right"),
}


class MalformedLineError(ValueError):
    """A response line could not be decoded."""


def split_segments(text: str) -> list[str]:
    """Split on spaces, keeping double quoted text together without the quotes.

    An unterminated quote runs to the end of the line.
    """
    text += " "

    segments = []
    current = ""
    quoted = False
    in_quotes = False
    for char in text:
        if char == " " and not in_quotes:
            if current or quoted:
                segments.append(current)
            current = ""
            quoted = False
        elif char == '"':
            in_quotes = not in_quotes
            quoted = True
        else:
            current += char

    if in_quotes:
        # Drop the trailing space added above
        segments.append(current[:-1])
    return segments


class SegmentCursor:
    """Forward-only cursor over the segments of one line."""

    def __init__(self, segments: list[str]):
        self._segments = segments
        self._index = 0

    def has_next(self) -> bool:
        return self._index < len(self._segments)

    def next(self) -> str:
        segment = self._segments[self._index]
        self._index += 1
        return segment

    def take_value(self) -> str:
        """Consume the next segment as a value, empty if the line has ended."""
        if not self.has_next():
            return ""
        return self.next()


def _normalise_address(value: str) -> str:
    if value == "" or value.startswith("0.0.0.0"):
        return ""
    # Devices sometimes append a description after the address
    parts = value.split()
    return parts[0] if parts else ""


def parse_attributes(segments: list[str]) -> Attributes:
    """Decode ``KEY:VALUE`` segments into named attributes.

    Unrecognised keys are kept as ``unknown_<KEY>``.
    """
    attributes: Attributes = {}
    cursor = SegmentCursor(segments)

    while cursor.has_next():
        segment = cursor.next()
        key, separator, value = segment.partition(":")

        if key in LOOKAHEAD_ATTRIBUTE_NAMES:
            attributes[LOOKAHEAD_ATTRIBUTE_NAMES[key]] = value if value else cursor.take_value()
            continue

        if key in FLAG_ATTRIBUTES:
            name, flag = FLAG_ATTRIBUTES[key]
            attributes[name] = flag
            continue

        if not separator:
            logger.warning(f"Unable to find separator in segment: {segment!r}")
            continue

        if key in ATTRIBUTE_NAMES:
            attributes[ATTRIBUTE_NAMES[key]] = value
        elif key in SWITCH_ATTRIBUTE_NAMES:
            attributes[SWITCH_ATTRIBUTE_NAMES[key]] = TRUE if value == "1" else FALSE
        elif key in PAIRED_ATTRIBUTE_NAMES:
            left_name, right_name = PAIRED_ATTRIBUTE_NAMES[key]
            left, _, right = value.partition(":")
            attributes[left_name] = left
            attributes[right_name] = right
        elif key == "NSRC":
            # NSRC:8/1 is count/type, older firmware sends only the count
            count, _, source_type = value.partition("/")
            attributes["source_count"] = count
            attributes["source_type"] = source_type
        elif key == "ADDR":
            attributes["address"] = _normalise_address(value)
        else:
            attributes[UNKNOWN_PREFIX + key] = value

    return attributes


def _io_direction(segment: str) -> str:
    if segment == "ICH":
        return IO_IN
    if segment == "OCH":
        return IO_OUT
    return IO_UNKNOWN


def _parse_matrix_sources(segments: list[str]) -> list[MatrixSrc]:
    sources = []
    for point in segments:
        num, separator, level = point.partition(":")
        # "-:-" is an unpopulated crosspoint
        if not separator or num in ("", "-") or level == "-":
            continue
        try:
            sources.append(MatrixSrc(num=int(num), level=int(level)))
        except ValueError:
            logger.warning(f"Invalid matrix crosspoint: {point!r}")
    return sources


def _build_level_alert(segments: list[str], remainder: str) -> LevelAlertResponse:
    num, _, side = segments[1].partition(".")
    return LevelAlertResponse(
        io=_io_direction(segments[0]),
        num=num,
        side=side,
        attributes=parse_attributes(segments[2:]),
    )


_RESPONSE_BUILDERS: dict[str, Callable[[list[str], str], LwrpResponse]] = {
    "VER": lambda segments, remainder: DeviceResponse(attributes=parse_attributes(segments)),
    "IP": lambda segments, remainder: NetworkResponse(attributes=parse_attributes(segments)),
    "SET": lambda segments, remainder: SetResponse(attributes=parse_attributes(segments)),
    "SRC": lambda segments, remainder: SourceResponse(
        num=segments[0], attributes=parse_attributes(segments[1:])
    ),
    "DST": lambda segments, remainder: DestinationResponse(
        num=int(segments[0]), attributes=parse_attributes(segments[1:])
    ),
    "MTR": lambda segments, remainder: MeterResponse(
        io=_io_direction(segments[0]), num=segments[1], attributes=parse_attributes(segments[2:])
    ),
    "LVL": _build_level_alert,
    "GPI": lambda segments, remainder: GpiResponse(
        num=segments[0], attributes=parse_attributes(segments[1:])
    ),
    "GPO": lambda segments, remainder: GpoResponse(
        num=segments[0], attributes=parse_attributes(segments[1:])
    ),
    "MIX": lambda segments, remainder: MatrixResponse(
        dst=int(segments[0]), src=_parse_matrix_sources(segments[1:])
    ),
    "ERROR": lambda segments, remainder: ErrorResponse(message=remainder),
}


def parse_line(line: str) -> LwrpResponse | None:
    """Parse one response line.

    Returns None for keywords this client does not know.

    Raises:
        MalformedLineError: the line has no keyword separator or its
            positional fields cannot be decoded
    """
    keyword, separator, remainder = line.partition(" ")
    if not separator:
        raise MalformedLineError(f"Missing separator in line: {line!r}")

    builder = _RESPONSE_BUILDERS.get(keyword)
    if builder is None:
        logger.warning(f"Unknown response type: {keyword} ----- {remainder}")
        return None

    segments = split_segments(remainder)
    try:
        return builder(segments, remainder)
    except (IndexError, ValueError) as e:
        raise MalformedLineError(f"Unable to decode {keyword} line {line!r}: {e}") from e


def process_response(lines: list[str], strict: bool = False) -> list[LwrpResponse]:
    """Parse every line of one response unit, in order.

    With ``strict`` a malformed line raises MalformedLineError, otherwise it
    is logged and skipped so the rest of the unit is still used.
    """
    responses: list[LwrpResponse] = []
    for line in lines:
        try:
            response = parse_line(line)
        except MalformedLineError as e:
            if strict:
                raise
            logger.warning(f"Skipping malformed line: {e}")
            continue
        if response is not None:
            responses.append(response)
    return responses
