"""Roborock S5 vacuum client library — firmware-aware miio commands."""

from .channel import CommandChannel, WebSocketChannel
from .client import RoborockS5Client
from .const import DIMENSION_MM, MAX_MARKER_WEIGHT, FanSpeed, PersistentDataType
from .exceptions import (
    RoborockCapacityExceededError,
    RoborockCommandError,
    RoborockConnectionError,
    RoborockError,
    RoborockInvalidArgumentError,
    RoborockNotSupportedError,
    RoborockTransportError,
)
from .models import BackupMap, DeviceCapabilities, FanSpeedSpec, PersistentMarker, TimerSpec, fan_speeds_for
from .persistent_data import flip_y, translate_persistent_data
from .protocol import ProtocolError, RoborockMessage, build_request, parse_message

__all__ = [
    "RoborockS5Client",
    "CommandChannel",
    "WebSocketChannel",
    "BackupMap",
    "DeviceCapabilities",
    "FanSpeed",
    "FanSpeedSpec",
    "PersistentDataType",
    "PersistentMarker",
    "TimerSpec",
    "DIMENSION_MM",
    "MAX_MARKER_WEIGHT",
    "ProtocolError",
    "RoborockMessage",
    "RoborockError",
    "RoborockCapacityExceededError",
    "RoborockCommandError",
    "RoborockConnectionError",
    "RoborockInvalidArgumentError",
    "RoborockNotSupportedError",
    "RoborockTransportError",
    "build_request",
    "fan_speeds_for",
    "flip_y",
    "parse_message",
    "translate_persistent_data",
]
