"""Firmware-aware command adapter for Roborock S5 / S50 vacuums."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

from .channel import CommandChannel
from .const import (
    CMD_DELETE_TIMER,
    CMD_GET_MAP,
    CMD_GET_RECOVER_MAPS,
    CMD_GET_STATUS,
    CMD_GET_TIMER,
    CMD_RECOVER_MAP,
    CMD_SAVE_MAP,
    CMD_SET_CUSTOM_MODE,
    CMD_SET_LAB_STATUS,
    CMD_SET_TIMER,
    CMD_UPDATE_TIMER,
    DIMENSION_MM,
    SAVE_MAP_TIMEOUT,
    FanSpeed,
)
from .exceptions import RoborockInvalidArgumentError, RoborockNotSupportedError
from .models import BackupMap, DeviceCapabilities, FanSpeedSpec, TimerSpec, fan_speeds_for
from .persistent_data import translate_persistent_data
from .protocol import ProtocolError

_LOGGER = logging.getLogger(__name__)


class RoborockS5Client:
    """High-level commands for a Roborock S5, shaped per firmware generation.

    The client never talks to the network itself; every request goes
    through the supplied command channel.

    Usage:
        client = RoborockS5Client(channel)
        await client.get_status()          # learns the firmware generation
        await client.add_timer("0 9 * * 1-5")
        maps = await client.get_backup_maps()
    """

    def __init__(
        self,
        channel: CommandChannel,
        *,
        dimension_mm: int = DIMENSION_MM,
        save_map_timeout: float = SAVE_MAP_TIMEOUT,
    ) -> None:
        self.channel = channel
        self.dimension_mm = dimension_mm
        self.save_map_timeout = save_map_timeout
        self.capabilities = DeviceCapabilities()
        self.fan_speeds: dict[FanSpeed, FanSpeedSpec] = fan_speeds_for(self.capabilities)
        self.on_capabilities_change: Callable[[DeviceCapabilities], None] | None = None
        self.on_map_update: Callable[[Any], None] | None = None

        # Map refreshes scheduled after save_map; held until they finish
        self._background_tasks: set[asyncio.Task[None]] = set()

    @property
    def supports_gen3(self) -> bool:
        """Return True if the robot accepts generation-3 command shapes."""
        return self.capabilities.supports_gen3

    # --- Status / capabilities ---

    def update_from_status(self, status: Mapping[str, Any] | list[Any]) -> DeviceCapabilities:
        """Derive the capability snapshot from a status message.

        Accepts the status dict or the raw get_status result (a list
        wrapping it). The fan speed table is rebuilt from the new snapshot
        before this returns.
        """
        if isinstance(status, list) and status:
            status = status[0]
        if not isinstance(status, Mapping):
            raise RoborockInvalidArgumentError(
                f"Status has to be a mapping, got {type(status).__name__}"
            )

        previous = self.capabilities
        capabilities = DeviceCapabilities.from_status(status)
        self.capabilities = capabilities
        self.fan_speeds = fan_speeds_for(capabilities)

        if capabilities.supports_gen3 != previous.supports_gen3:
            _LOGGER.info(
                "Firmware generation changed (msg_ver=%d, gen3=%s)",
                capabilities.msg_ver,
                capabilities.supports_gen3,
            )
            if self.on_capabilities_change:
                self.on_capabilities_change(capabilities)

        return capabilities

    async def get_status(self) -> dict[str, Any]:
        """Query the robot status and refresh the capability snapshot."""
        result = await self.channel.send_command(CMD_GET_STATUS, [])
        self.update_from_status(result)
        status = result[0] if isinstance(result, list) else result
        return dict(status)

    # --- Fan speed ---

    async def set_fan_speed(self, level: FanSpeed | str) -> Any:
        """Set the suction level using the current generation's encoding.

        Raises:
            RoborockInvalidArgumentError: If the level is unknown.
            RoborockNotSupportedError: If this firmware has no such level.
        """
        try:
            speed = FanSpeed(level)
        except ValueError:
            raise RoborockInvalidArgumentError(f"Unknown fan speed: {level!r}") from None

        spec = fan_speeds_for(self.capabilities).get(speed)
        if spec is None:
            raise RoborockNotSupportedError(
                f"Fan speed '{speed.value}' is not supported by this firmware"
            )
        return await self.channel.send_command(CMD_SET_CUSTOM_MODE, [spec.value])

    # --- Timers ---

    async def add_timer(self, cron: str) -> Any:
        """Create a cleaning timer from a cron expression.

        The cron expression is passed to the robot unchecked.
        """
        timer = TimerSpec.create(cron, self.capabilities)
        _LOGGER.debug("Adding timer %s (%s)", timer.id, cron)
        return await self.channel.send_command(CMD_SET_TIMER, timer.to_params())

    async def get_timers(self) -> Any:
        """Return the raw timer list."""
        return await self.channel.send_command(CMD_GET_TIMER, [])

    async def delete_timer(self, timer_id: str) -> Any:
        """Delete a timer by id."""
        return await self.channel.send_command(CMD_DELETE_TIMER, [str(timer_id)])

    async def toggle_timer(self, timer_id: str, enabled: bool) -> Any:
        """Enable or disable a timer."""
        return await self.channel.send_command(
            CMD_UPDATE_TIMER, [str(timer_id), "on" if enabled else "off"]
        )

    # --- Persistent map ---

    async def set_lab_status(self, flag: bool) -> Any:
        """Enable or disable lab mode (persistent maps)."""
        return await self.channel.send_command(CMD_SET_LAB_STATUS, [1 if flag else 0])

    async def save_persistent_data(self, persistent_data: Any) -> Any:
        """Save no-go zones and virtual barriers.

        Markers are validated and converted to device coordinates before
        anything is sent. A map refresh is scheduled after the save
        whether it succeeded or not.

        Args:
            persistent_data: List of markers, ``[0, x1, y1, ..., x4, y4]``
                for a zone and ``[1, x1, y1, x2, y2]`` for a barrier.

        Raises:
            RoborockInvalidArgumentError: If the markers are malformed.
            RoborockCapacityExceededError: If there are too many markers.
        """
        params = translate_persistent_data(persistent_data, self.dimension_mm)
        try:
            return await self.channel.send_command(
                CMD_SAVE_MAP, params, timeout=self.save_map_timeout
            )
        finally:
            self._schedule_map_refresh()

    async def poll_map(self) -> Any:
        """Fetch the current map and hand it to on_map_update."""
        map_data = await self.channel.send_command(CMD_GET_MAP, [])
        if self.on_map_update:
            self.on_map_update(map_data)
        return map_data

    def _schedule_map_refresh(self) -> None:
        task = asyncio.get_running_loop().create_task(self._refresh_map())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _refresh_map(self) -> None:
        try:
            await self.poll_map()
        except Exception as e:
            _LOGGER.warning("Map refresh after save failed: %s", e)

    # --- Map backups ---

    async def get_backup_maps(self) -> list[BackupMap]:
        """List the map backups stored on the robot.

        Raises:
            RoborockNotSupportedError: On firmware older than gen3.
            ProtocolError: If the robot sent a malformed backup list.
        """
        self._require_gen3("Map backups")
        response = await self.channel.send_command(CMD_GET_RECOVER_MAPS, [])
        if response is None:
            return []
        if not isinstance(response, list):
            raise ProtocolError(f"Unexpected get_recover_maps result: {response!r}")
        return [BackupMap.from_raw(entry) for entry in response]

    async def restore_backup_map(self, backup_map: BackupMap | Mapping[str, Any]) -> Any:
        """Restore a map backup.

        Raises:
            RoborockNotSupportedError: On firmware older than gen3.
            RoborockInvalidArgumentError: If the record carries no id.
        """
        self._require_gen3("Map backups")
        if isinstance(backup_map, Mapping):
            backup_id = backup_map.get("id")
        else:
            backup_id = getattr(backup_map, "id", None)
        if backup_id is None:
            raise RoborockInvalidArgumentError(f"Backup map has no id: {backup_map!r}")
        return await self.channel.send_command(CMD_RECOVER_MAP, [backup_id])

    def _require_gen3(self, feature: str) -> None:
        if not self.capabilities.supports_gen3:
            raise RoborockNotSupportedError(
                f"{feature} require gen3 firmware (msg_ver={self.capabilities.msg_ver})"
            )

    async def close(self) -> None:
        """Wait for scheduled map refreshes to finish."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks)
