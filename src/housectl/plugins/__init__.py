"""Extension layer — plugin system via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus single-file plugins in ``.housectl/plugins/``.
INVARIANT: Plugin failures are warnings, never errors.
"""

from housectl.plugins.event_bus import EventBus
from housectl.plugins.manager import PluginManager

__all__ = ["EventBus", "PluginManager"]
