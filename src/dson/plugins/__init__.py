"""Extension layer: third-party Convertible adapters via pluggy.

Discovery: entry_points (pip-installed) in the ``dson.plugins`` group.
INVARIANT: Plugin failures are warnings, never errors.
"""

from dson.plugins.hookspecs import hookimpl
from dson.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
