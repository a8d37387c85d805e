"""Helpers for Livewire audio-over-IP multicast addresses.

Every Livewire stream has a stream number (0-65535). The multicast address
for the stream is the stream number added to a base address that depends on
the stream format:

    standard / livestream   239.192.0.0
    backfeed standard       239.193.0.0
    backfeed livestream     239.195.0.0
    surround                239.196.0.0

Standard and livestream share a base, so decoding 239.192.x.x always reports
the standard format.
"""

import ipaddress
from enum import Enum

MIN_STREAM_NUM = 0
MAX_STREAM_NUM = 65535

SIP_PREFIX = "sip:"


class StreamNumberRangeError(ValueError):
    """Stream number is outside 0-65535."""


class UnknownStreamFormatError(ValueError):
    """Address does not belong to a known Livewire stream format."""


class StreamFormat(Enum):
    STANDARD = "standard"
    LIVESTREAM = "livestream"
    BACKFEED_STANDARD = "backfeed_standard"
    BACKFEED_LIVESTREAM = "backfeed_livestream"
    SURROUND = "surround"


_FORMAT_BASE_IP = {
    StreamFormat.STANDARD: "239.192.0.0",
    StreamFormat.LIVESTREAM: "239.192.0.0",
    StreamFormat.BACKFEED_STANDARD: "239.193.0.0",
    StreamFormat.BACKFEED_LIVESTREAM: "239.195.0.0",
    StreamFormat.SURROUND: "239.196.0.0",
}

# Second octet -> format. 192 is ambiguous, standard wins.
_FORMAT_BY_OCTET = {
    192: StreamFormat.STANDARD,
    193: StreamFormat.BACKFEED_STANDARD,
    195: StreamFormat.BACKFEED_LIVESTREAM,
    196: StreamFormat.SURROUND,
}


def ip_to_int(ip: str) -> int:
    """Dotted-quad IPv4 address to an unsigned 32-bit integer."""
    return int(ipaddress.IPv4Address(ip))


def int_to_ip(value: int) -> str:
    """Unsigned 32-bit integer to a dotted-quad IPv4 address."""
    return str(ipaddress.IPv4Address(value))


def stream_format_base_ip(stream_format: StreamFormat) -> str:
    """Return the multicast base address for a stream format."""
    try:
        return _FORMAT_BASE_IP[stream_format]
    except KeyError:
        raise UnknownStreamFormatError(f"Invalid stream format: {stream_format!r}") from None


def stream_format_from_address(address: str) -> StreamFormat:
    """Work out the stream format from the second octet of a multicast address."""
    octets = address.split(".")
    try:
        format_octet = int(octets[1])
    except (IndexError, ValueError):
        raise UnknownStreamFormatError(f"Not a dotted-quad address: {address!r}") from None

    stream_format = _FORMAT_BY_OCTET.get(format_octet)
    if stream_format is None:
        raise UnknownStreamFormatError(f"Unknown stream format for address {address}")
    return stream_format


def stream_num_to_address(stream_num: int, stream_format: StreamFormat = StreamFormat.STANDARD) -> str:
    """Return the multicast address carrying a stream number.

    Raises:
        StreamNumberRangeError: stream_num is not within 0-65535
    """
    if not (MIN_STREAM_NUM <= stream_num <= MAX_STREAM_NUM):
        raise StreamNumberRangeError(
            f"Stream number {stream_num} out of range, must be {MIN_STREAM_NUM}-{MAX_STREAM_NUM}"
        )
    base = ip_to_int(stream_format_base_ip(stream_format))
    return int_to_ip(base + stream_num)


def address_to_stream_num(address: str) -> int:
    """Return the stream number carried by a Livewire multicast address.

    Raises:
        UnknownStreamFormatError: the address is not in a Livewire range
    """
    stream_format = stream_format_from_address(address)
    base = ip_to_int(stream_format_base_ip(stream_format))
    return ip_to_int(address) - base


def source_to_address(source: str) -> str:
    """Resolve user supplied source text to the value used in ``DST n ADDR:``.

    ``sip:`` descriptors and dotted-quad addresses pass through untouched,
    anything else must be a standard-format stream number.

    Raises:
        ValueError: source is empty or not a usable stream number
    """
    source = source.strip()
    if not source:
        raise ValueError("Source is empty")
    if source.startswith(SIP_PREFIX):
        return source
    if "." in source:
        # Validates the dotted quad, raises ValueError otherwise
        ipaddress.IPv4Address(source)
        return source
    try:
        stream_num = int(source)
    except ValueError:
        raise ValueError(f"Source {source!r} is not a stream number") from None
    return stream_num_to_address(stream_num)
