"""
Tools for Renoma plugins.

This package contains the base AutoTool class and the bundled dice_roll plugin.
"""

from renoma.plugins.tools.auto_tool import *
