"""Typed records for the responses an LWRP device sends.

Each wire keyword maps to exactly one record class. Consumers can dispatch
on ``isinstance`` or on the ``response_type`` class attribute.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union

Attributes = dict[str, str]


class ResponseType(Enum):
    DEVICE = "device"
    NETWORK = "network"
    SET = "set"
    SOURCE = "source"
    DESTINATION = "destination"
    METER = "meter"
    LEVEL_ALERT = "level_alert"
    GPI = "gpi"
    GPO = "gpo"
    MATRIX = "matrix"
    ERROR = "error"


# Meter/level direction: ICH -> in, OCH -> out
IO_IN = "in"
IO_OUT = "out"
IO_UNKNOWN = "unknown"


@dataclass
class DeviceResponse:
    """``VER`` - device and protocol versions, channel counts."""
    response_type: ClassVar[ResponseType] = ResponseType.DEVICE
    attributes: Attributes = field(default_factory=dict)


@dataclass
class NetworkResponse:
    """``IP`` - network interface settings."""
    response_type: ClassVar[ResponseType] = ResponseType.NETWORK
    attributes: Attributes = field(default_factory=dict)


@dataclass
class SetResponse:
    response_type: ClassVar[ResponseType] = ResponseType.SET
    attributes: Attributes = field(default_factory=dict)


@dataclass
class SourceResponse:
    response_type: ClassVar[ResponseType] = ResponseType.SOURCE
    num: str
    attributes: Attributes = field(default_factory=dict)


@dataclass
class DestinationResponse:
    """``DST`` - the state of one output, including the routed ``address``."""
    response_type: ClassVar[ResponseType] = ResponseType.DESTINATION
    num: int
    attributes: Attributes = field(default_factory=dict)


@dataclass
class MeterResponse:
    response_type: ClassVar[ResponseType] = ResponseType.METER
    io: str
    num: str
    attributes: Attributes = field(default_factory=dict)


@dataclass
class LevelAlertResponse:
    """``LVL`` - clip/silence alert for one side of a channel (e.g. ``4.L``)."""
    response_type: ClassVar[ResponseType] = ResponseType.LEVEL_ALERT
    io: str
    num: str
    side: str
    attributes: Attributes = field(default_factory=dict)


@dataclass
class GpiResponse:
    response_type: ClassVar[ResponseType] = ResponseType.GPI
    num: str
    attributes: Attributes = field(default_factory=dict)


@dataclass
class GpoResponse:
    response_type: ClassVar[ResponseType] = ResponseType.GPO
    num: str
    attributes: Attributes = field(default_factory=dict)


@dataclass(frozen=True)
class MatrixSrc:
    """One populated crosspoint of a mix matrix."""
    num: int
    level: int


@dataclass
class MatrixResponse:
    """``MIX`` - crosspoints feeding one matrix destination."""
    response_type: ClassVar[ResponseType] = ResponseType.MATRIX
    dst: int
    src: list[MatrixSrc] = field(default_factory=list)


@dataclass
class ErrorResponse:
    response_type: ClassVar[ResponseType] = ResponseType.ERROR
    message: str


LwrpResponse = Union[
    DeviceResponse,
    NetworkResponse,
    SetResponse,
    SourceResponse,
    DestinationResponse,
    MeterResponse,
    LevelAlertResponse,
    GpiResponse,
    GpoResponse,
    MatrixResponse,
    ErrorResponse,
]
