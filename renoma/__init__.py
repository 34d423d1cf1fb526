"""
Renoma - A plugin host for character chat with tool calling.

This package runs external tool plugins as subprocesses speaking a
line-delimited JSON-RPC protocol and interleaves their results with
streamed model output.
"""

# Client interface (main entry point)
from renoma.client.renoma import Renoma

# Factory for creating host components
from renoma.factories.renoma_factory import RenomaFactory

# Plugin host and plugin-side utilities
from renoma.plugins.manager import PluginManager
from renoma.plugins.runtime import PluginServer, run_plugin
from renoma.plugins.tools.auto_tool import AutoTool
from renoma.domains.plugins import PluginManifest, Tool

# Package metadata
__all__ = [
    # Main client interfaces
    "Renoma",
    # Factories
    "RenomaFactory",
    # Plugins
    "PluginManager",
    "PluginServer",
    "run_plugin",
    "AutoTool",
    "PluginManifest",
    "Tool",
]
