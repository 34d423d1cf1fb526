"""
Dice rolling plugin.

Run as an executable plugin with ``python -m renoma.plugins.tools.dice_roll``.
It serves a single ``roll_dice`` tool taking NdS+M notation.
"""
import random
import re
from typing import Any, Dict

from renoma.plugins.runtime import run_plugin
from renoma.plugins.tools.auto_tool import AutoTool, ToolArgumentError

PLUGIN_NAME = "dice_roll"
PLUGIN_VERSION = "0.1.0"
PLUGIN_DESCRIPTION = "Roll dice for RPG games"

MAX_DICE = 100
MAX_SIDES = 1000

_NOTATION = re.compile(r"^\s*(\d*)\s*[dD]\s*(\d*)\s*(?:([+-])\s*(\d+))?\s*$")


def parse_notation(notation: str):
    """Parse dice notation into (count, sides, modifier)."""
    match = _NOTATION.match(notation or "")
    if not match:
        raise ToolArgumentError(f"Invalid dice notation: {notation!r}")
    count_text, sides_text, sign, modifier_text = match.groups()
    count = int(count_text) if count_text else 1
    sides = int(sides_text) if sides_text else 6
    modifier = int(modifier_text) if modifier_text else 0
    if sign == "-":
        modifier = -modifier
    if not 1 <= count <= MAX_DICE:
        raise ToolArgumentError(f"Dice count must be between 1 and {MAX_DICE}")
    if not 1 <= sides <= MAX_SIDES:
        raise ToolArgumentError(f"Dice sides must be between 1 and {MAX_SIDES}")
    return count, sides, modifier


class RollDiceTool(AutoTool):
    def __init__(self, rng: random.Random = None):
        super().__init__(
            name="roll_dice",
            description="Roll some dice using NdS notation (e.g. 2d20)",
        )
        self._rng = rng or random.SystemRandom()

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "notation": {
                    "type": "string",
                    "description": "The dice notation (e.g. '2d6', '1d20+5')",
                }
            },
            "required": ["notation"],
        }

    def execute(self, notation: str = "1d6", **_) -> Dict[str, Any]:
        count, sides, modifier = parse_notation(notation)
        rolls = [self._rng.randint(1, sides) for _ in range(count)]
        return {
            "notation": notation,
            "count": count,
            "sides": sides,
            "modifier": modifier,
            "rolls": rolls,
            "total": sum(rolls) + modifier,
        }


def main() -> None:
    run_plugin(PLUGIN_NAME, PLUGIN_VERSION, PLUGIN_DESCRIPTION, [RollDiceTool()])


if __name__ == "__main__":
    main()
