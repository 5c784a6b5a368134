"""Control snapshot store for v4l-saver.

This module provides the ControlSnapshotStore class for saving a device's
current control values to a per-serial JSON file and replaying them later,
plus read-only support for the two older per-device-path file formats.
"""

from __future__ import annotations

import json
import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from v4lsaver.core.capture import DeviceManager
from v4lsaver.core.errors import GatewayError
from v4lsaver.core.gateway import parse_controls
from v4lsaver.core.models import (
    ALLOWED_CONTROLS,
    ControlSetting,
    DeviceInfo,
    DeviceOutcome,
    LoadResult,
    SaveResult,
    SnapshotRecord,
    SnapshotSource,
    classify_value,
)

logger = logging.getLogger(__name__)

APP_DIR_NAME = "v4l-saver"
CONFIG_DIR_ENV = "V4L_SAVER_CONFIG_DIR"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def get_default_config_dir() -> Path:
    """Get the default snapshot directory.

    Returns:
        $V4L_SAVER_CONFIG_DIR when set, else ${XDG_CONFIG_HOME:-~/.config}/v4l-saver
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    base = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return base / APP_DIR_NAME


def sanitize_serial(serial: str) -> str:
    """Make a serial number safe to use as a file name.

    Every character outside ``[A-Za-z0-9_-]`` becomes ``_``, so distinct
    serials such as ``A/B`` and ``A_B`` share one file.
    """
    return _UNSAFE_FILENAME_CHARS.sub("_", serial)


class ControlSnapshotStore:
    """Saves and restores allow-listed device controls keyed by serial number.

    Provides methods for:
    - Capturing current control values into ``<serial>.json``
    - Replaying a saved snapshot after checking the live serial
    - Falling back to legacy ``<video>.json`` and ``<video>.ctrls`` files
    """

    def __init__(self, devices: DeviceManager, config_dir: Optional[Path] = None):
        """Initialize the snapshot store.

        Args:
            devices: DeviceManager used to resolve and query devices
            config_dir: Optional custom snapshot directory. If None, uses the default.
        """
        if config_dir is None:
            config_dir = get_default_config_dir()

        self.devices = devices
        self.gateway = devices.gateway
        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        logger.debug(f"Snapshot store initialized with config dir: {self.config_dir}")

    # ------------------------------------------------------------------
    # File naming
    # ------------------------------------------------------------------

    def snapshot_path(self, serial: str) -> Path:
        """Path of the serial-keyed snapshot for a serial number."""
        return self.config_dir / f"{sanitize_serial(serial)}.json"

    def legacy_json_path(self, device: str) -> Path:
        """Path of the legacy device-keyed JSON snapshot."""
        return self.config_dir / f"{os.path.basename(device)}.json"

    def legacy_ctrls_path(self, device: str) -> Path:
        """Path of the legacy plain-text control dump."""
        return self.config_dir / f"{os.path.basename(device)}.ctrls"

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    def _check_device(
        self, device: str
    ) -> Tuple[Optional[DeviceOutcome], Optional[DeviceInfo]]:
        """Apply the usability and serial gates shared by save and load.

        Returns:
            (skip outcome, None) when the device must be skipped, otherwise
            (None, DeviceInfo).
        """
        summary = self.devices.get_format_summary(device)
        if not summary.usable:
            logger.info(f"Skipping {device} (device is not usable for capture)")
            return DeviceOutcome.SKIPPED_UNUSABLE, None

        info = self.devices.get_info(device)
        if not info.serial:
            logger.info(f"Skipping {device} (no serial number found)")
            return DeviceOutcome.SKIPPED_NO_SERIAL, None

        return None, info

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def capture_controls(self, device: str) -> Dict[str, ControlSetting]:
        """Read the device's current allow-listed controls.

        Returns:
            Mapping in allow-list order; controls the device does not report
            are left out.
        """
        try:
            dump = self.gateway.query_controls(device)
        except GatewayError as e:
            logger.warning(f"  Could not read controls from {device}: {e}")
            dump = ""

        reported = parse_controls(dump)
        controls: Dict[str, ControlSetting] = {}
        for name in ALLOWED_CONTROLS:
            if name not in reported:
                continue
            type_tag, value = reported[name]
            if not value:
                continue
            controls[name] = ControlSetting(
                name=name, value=classify_value(value), type_tag=type_tag
            )
        return controls

    def _write_record(self, path: Path, record: SnapshotRecord) -> None:
        """Write a record atomically.

        Raises:
            IOError: If the snapshot file cannot be written
        """
        temp_file = path.with_suffix(".tmp")
        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(record.to_dict(), f, indent=2, ensure_ascii=False)
                f.write("\n")

            # Atomic rename
            temp_file.replace(path)
        except OSError as e:
            temp_file.unlink(missing_ok=True)
            logger.error(f"Failed to write snapshot {path}: {e}")
            raise IOError(f"Failed to write snapshot {path}: {e}") from e

    def save(self, device: str) -> SaveResult:
        """Save the allow-listed controls of one device.

        Args:
            device: Device path, e.g. /dev/video0

        Returns:
            SaveResult with the number of controls written

        Raises:
            IOError: If the snapshot file cannot be written
        """
        skip, info = self._check_device(device)
        if skip is not None:
            return SaveResult(device=device, outcome=skip)

        path = self.snapshot_path(info.serial)
        logger.info(f"Saving {device} (SN: {info.serial}) to {path}")

        record = SnapshotRecord(
            device=device,
            serial=info.serial,
            timestamp=datetime.now().astimezone().isoformat(timespec="seconds"),
            card_type=info.card_type,
            vendor=info.vendor,
            controls=self.capture_controls(device),
        )
        self._write_record(path, record)

        logger.info(f"  Saved {len(record.controls)} supported controls")
        return SaveResult(
            device=device,
            outcome=DeviceOutcome.SAVED,
            serial=info.serial,
            path=str(path),
            count=len(record.controls),
        )

    def save_all(self, token: Optional[str] = None) -> List[SaveResult]:
        """Save every device matched by ``token`` (all devices when None).

        Raises:
            DeviceNotFoundError: If an explicit token matches no device
        """
        results: List[SaveResult] = []
        for device in self.devices.resolve(token):
            try:
                results.append(self.save(device))
            except IOError:
                results.append(SaveResult(device=device, outcome=DeviceOutcome.WRITE_FAILED))
        return results

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def _read_record(self, path: Path) -> SnapshotRecord:
        """Read and parse a JSON snapshot file.

        Raises:
            ValueError: If the file cannot be read or is not a valid snapshot
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Snapshot file is corrupted: {e}") from e
        except OSError as e:
            raise ValueError(f"Failed to read snapshot: {e}") from e

        record = SnapshotRecord.from_dict(data)

        raw_controls = data.get("controls") or {}
        for name in ALLOWED_CONTROLS:
            if name in raw_controls and name not in record.controls:
                logger.warning(f"  Ignoring {name}: stored value is missing or unusable")
        return record

    def _read_ctrls(self, path: Path) -> Dict[str, ControlSetting]:
        """Read a legacy plain-text control dump."""
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ValueError(f"Failed to read snapshot: {e}") from e

        return {
            name: ControlSetting(name=name, value=classify_value(value), type_tag=type_tag)
            for name, (type_tag, value) in parse_controls(text).items()
            if value
        }

    def apply_controls(
        self, device: str, controls: Dict[str, ControlSetting]
    ) -> Tuple[int, List[str]]:
        """Send allow-listed controls to the device in allow-list order.

        A failed control is logged and skipped; the rest are still applied.

        Returns:
            (number applied, names that failed)
        """
        applied = 0
        failed: List[str] = []
        for name in ALLOWED_CONTROLS:
            setting = controls.get(name)
            if setting is None:
                continue
            wire = setting.value.to_wire()
            logger.info(f"  Setting {name}={wire}")
            try:
                self.gateway.set_control(device, name, wire)
                applied += 1
            except GatewayError as e:
                logger.warning(f"    Failed to set {name} (control may not be supported): {e}")
                failed.append(name)
        return applied, failed

    def _load_serial_snapshot(self, device: str, serial: str, path: Path) -> LoadResult:
        """Apply a serial-keyed snapshot after checking its stored serial.

        Args:
            device: Device path
            serial: Serial number reported by the live device
            path: Snapshot file for that serial

        Returns:
            LoadResult; SERIAL_MISMATCH when the file belongs to another device
        """
        logger.info(f"Loading {device} (SN: {serial}) from {path}")
        try:
            record = self._read_record(path)
        except ValueError as e:
            logger.error(f"  Skipping {device}: {e}")
            return LoadResult(
                device=device,
                outcome=DeviceOutcome.INVALID_RECORD,
                serial=serial,
                path=str(path),
                source=SnapshotSource.SERIAL,
            )

        if record.serial != serial:
            logger.warning(
                f"  Warning: Serial number mismatch (file: {record.serial}, device: {serial})"
            )
            logger.warning("  Skipping load for safety")
            return LoadResult(
                device=device,
                outcome=DeviceOutcome.SERIAL_MISMATCH,
                serial=serial,
                path=str(path),
                source=SnapshotSource.SERIAL,
            )

        applied, failed = self.apply_controls(device, record.controls)
        logger.info(f"  Loaded {applied} controls successfully")
        return LoadResult(
            device=device,
            outcome=DeviceOutcome.LOADED,
            serial=serial,
            path=str(path),
            source=SnapshotSource.SERIAL,
            applied=applied,
            failed=failed,
        )

    def _load_legacy(
        self, device: str, serial: str, path: Path, source: SnapshotSource
    ) -> LoadResult:
        """Apply a device-keyed legacy file without a serial check.

        Args:
            device: Device path
            serial: Serial number reported by the live device
            path: Legacy ``.json`` or ``.ctrls`` file
            source: Which legacy format ``path`` holds
        """
        if source == SnapshotSource.LEGACY_JSON:
            logger.info(f"Loading {device} from legacy device-based file: {path}")
        else:
            logger.info(f"Loading {device} from old legacy format: {path}")
        logger.info("  Note: Consider re-saving to use serial-based naming")

        try:
            if source == SnapshotSource.LEGACY_JSON:
                controls = self._read_record(path).controls
            else:
                controls = self._read_ctrls(path)
        except ValueError as e:
            logger.error(f"  Skipping {device}: {e}")
            return LoadResult(
                device=device,
                outcome=DeviceOutcome.INVALID_RECORD,
                serial=serial,
                path=str(path),
                source=source,
            )

        applied, failed = self.apply_controls(device, controls)
        label = "legacy" if source == SnapshotSource.LEGACY_JSON else "old legacy"
        logger.info(f"  Loaded {applied} controls from {label} format")
        return LoadResult(
            device=device,
            outcome=DeviceOutcome.LOADED,
            serial=serial,
            path=str(path),
            source=source,
            applied=applied,
            failed=failed,
        )

    def load(self, device: str) -> LoadResult:
        """Restore saved controls onto one device.

        Looks for ``<serial>.json`` first, then ``<video>.json``, then
        ``<video>.ctrls``. Only the serial-keyed file is checked against the
        live serial; the legacy forms predate serial naming.

        Args:
            device: Device path, e.g. /dev/video0

        Returns:
            LoadResult with the number of controls applied
        """
        skip, info = self._check_device(device)
        if skip is not None:
            return LoadResult(device=device, outcome=skip)

        serial = info.serial
        path = self.snapshot_path(serial)
        if path.is_file():
            return self._load_serial_snapshot(device, serial, path)

        legacy_json = self.legacy_json_path(device)
        if legacy_json.is_file():
            return self._load_legacy(device, serial, legacy_json, SnapshotSource.LEGACY_JSON)

        legacy_ctrls = self.legacy_ctrls_path(device)
        if legacy_ctrls.is_file():
            return self._load_legacy(device, serial, legacy_ctrls, SnapshotSource.LEGACY_CTRLS)

        logger.info(f"No saved controls for {device} (SN: {serial})")
        return LoadResult(device=device, outcome=DeviceOutcome.NO_SAVED_CONTROLS, serial=serial)

    def load_all(self, token: Optional[str] = None) -> List[LoadResult]:
        """Load every device matched by ``token`` (all devices when None).

        Raises:
            DeviceNotFoundError: If an explicit token matches no device
        """
        return [self.load(device) for device in self.devices.resolve(token)]

