"""Extension layer — audit subscribers via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints.
INVARIANT: Plugin failures are warnings, never errors.
"""

from fieldrules.plugins.hookspecs import hookimpl
from fieldrules.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
