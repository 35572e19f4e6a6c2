"""Data models for Roborock S5 capabilities, timers, markers and backups."""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .const import (
    BARRIER_WEIGHT,
    GEN3_MSG_VER,
    TIMER_ACTION_START_CLEAN,
    TIMER_GEN3_CLEAN_PARAMS,
    ZONE_WEIGHT,
    FanSpeed,
    PersistentDataType,
)
from .protocol import ProtocolError


@dataclass(frozen=True)
class DeviceCapabilities:
    """Firmware capability snapshot derived from a status message.

    A new instance replaces the old one on every status update, so an
    operation that binds the snapshot once sees a consistent generation
    for its whole run.
    """

    msg_ver: int = 0
    supports_gen3: bool = False

    @classmethod
    def from_status(cls, status: Mapping[str, Any]) -> DeviceCapabilities:
        """Build a snapshot from a raw get_status result."""
        try:
            msg_ver = int(status.get("msg_ver", 0))
        except (ValueError, TypeError):
            msg_ver = 0
        return cls(msg_ver=msg_ver, supports_gen3=msg_ver >= GEN3_MSG_VER)


@dataclass(frozen=True)
class FanSpeedSpec:
    """Label and device value of one fan speed level."""

    label: str
    value: int


LEGACY_FAN_SPEEDS: Mapping[FanSpeed, FanSpeedSpec] = {
    FanSpeed.MIN: FanSpeedSpec("Min", 1),
    FanSpeed.LOW: FanSpeedSpec("Silent", 38),
    FanSpeed.MEDIUM: FanSpeedSpec("Normal", 60),
    FanSpeed.HIGH: FanSpeedSpec("Turbo", 75),
    FanSpeed.MAX: FanSpeedSpec("Max", 100),
    FanSpeed.MOP: FanSpeedSpec("Mop", 105),
}

# Gen3 firmware has no MIN level
GEN3_FAN_SPEEDS: Mapping[FanSpeed, FanSpeedSpec] = {
    FanSpeed.LOW: FanSpeedSpec("Silent", 101),
    FanSpeed.MEDIUM: FanSpeedSpec("Normal", 102),
    FanSpeed.HIGH: FanSpeedSpec("Turbo", 103),
    FanSpeed.MAX: FanSpeedSpec("Max", 104),
    FanSpeed.MOP: FanSpeedSpec("Mop", 105),
}


def fan_speeds_for(capabilities: DeviceCapabilities) -> dict[FanSpeed, FanSpeedSpec]:
    """Return a fresh fan speed table for the given firmware generation."""
    table = GEN3_FAN_SPEEDS if capabilities.supports_gen3 else LEGACY_FAN_SPEEDS
    return dict(table)


@dataclass(frozen=True)
class TimerSpec:
    """A cron-scheduled cleaning timer as sent with set_timer."""

    id: str
    cron: str
    action: tuple[str, Any]

    @classmethod
    def create(
        cls,
        cron: str,
        capabilities: DeviceCapabilities,
        now_ms: int | None = None,
    ) -> TimerSpec:
        """Build a timer whose action matches the firmware generation.

        Older firmware ignores set_timer action arguments, so an empty
        placeholder pair is sent instead.
        """
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        if capabilities.supports_gen3:
            action: tuple[str, Any] = (
                TIMER_ACTION_START_CLEAN,
                dict(TIMER_GEN3_CLEAN_PARAMS),
            )
        else:
            action = ("", "")
        return cls(id=str(now_ms), cron=cron, action=action)

    def to_params(self) -> list[Any]:
        """Encode as set_timer params: [[id, [cron, [command, args]]]]."""
        return [[self.id, [self.cron, list(self.action)]]]


@dataclass(frozen=True)
class PersistentMarker:
    """A no-go zone or virtual barrier in device-map millimetres."""

    kind: PersistentDataType
    coordinates: tuple[int, ...]

    @property
    def weight(self) -> int:
        """Share of the marker budget this marker consumes."""
        return ZONE_WEIGHT if self.kind == PersistentDataType.ZONE else BARRIER_WEIGHT

    def flipped(self, dimension_mm: int) -> PersistentMarker:
        """Return the marker with every Y coordinate mirrored on the canvas."""
        coords = tuple(
            dimension_mm - value if index % 2 else value
            for index, value in enumerate(self.coordinates)
        )
        return PersistentMarker(kind=self.kind, coordinates=coords)

    def to_params(self) -> list[int]:
        """Encode as a save_map entry: [kind, x1, y1, x2, y2, ...]."""
        return [int(self.kind), *self.coordinates]


@dataclass(frozen=True)
class BackupMap:
    """A map backup stored on the robot."""

    id: Any
    timestamp: datetime
    raw: list[Any] = field(default_factory=list, compare=False, repr=False)

    @classmethod
    def from_raw(cls, entry: Any) -> BackupMap:
        """Parse one get_recover_maps entry: [id, epoch_seconds].

        Raises:
            ProtocolError: If the robot sent a malformed entry.
        """
        if not isinstance(entry, (list, tuple)) or len(entry) < 2:
            raise ProtocolError(f"Malformed backup map entry: {entry!r}")
        backup_id, epoch_seconds = entry[0], entry[1]
        try:
            timestamp = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
        except (TypeError, ValueError, OverflowError, OSError) as e:
            raise ProtocolError(f"Invalid backup map timestamp {epoch_seconds!r}: {e}") from e
        return cls(id=backup_id, timestamp=timestamp, raw=list(entry))
