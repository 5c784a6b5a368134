"""Control snapshot persistence."""

from v4lsaver.core.settings.manager import (
    ControlSnapshotStore,
    get_default_config_dir,
    sanitize_serial,
)

__all__ = ["ControlSnapshotStore", "get_default_config_dir", "sanitize_serial"]
