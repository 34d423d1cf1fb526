"""
Shared fixtures for the Renoma test suite.

Plugin executables are small shell wrappers that run a Python script with
the current interpreter and the repository on PYTHONPATH.
"""

import shlex
import stat
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]

ECHO_PLUGIN_SOURCE = '''
from renoma.plugins.runtime import run_plugin
from renoma.plugins.tools.auto_tool import AutoTool, ToolArgumentError


class EchoTool(AutoTool):
    def __init__(self):
        super().__init__(name="echo", description="Echo the arguments back")

    def execute(self, **params):
        if params.get("fail"):
            raise ToolArgumentError("asked to fail")
        return params


class ShoutTool(AutoTool):
    def __init__(self):
        super().__init__(name="shout", description="Upper-case a text")

    def execute(self, text=""):
        return text.upper()


run_plugin("echo_plugin", "1.0.0", "Echoes arguments", [EchoTool(), ShoutTool()])
'''

REJECTING_PLUGIN_SOURCE = '''
import json
import sys

for line in sys.stdin:
    request = json.loads(line)
    response = {
        "jsonrpc": "2.0",
        "error": {"code": -32603, "message": "not today"},
        "id": request["id"],
    }
    sys.stdout.write(json.dumps(response) + "\\n")
    sys.stdout.flush()
'''


def make_executable(path: Path) -> Path:
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def write_shell_plugin(directory: Path, name: str, body: str) -> Path:
    """Write an executable shell script plugin."""
    path = directory / name
    path.write_text(f"#!/bin/sh\n{body}\n")
    return make_executable(path)


def write_python_plugin(directory: Path, name: str, source: str) -> Path:
    """Write a Python plugin script plus an executable wrapper running it."""
    script = directory / f"{name}.py"
    script.write_text(source)
    command = (
        f"exec env PYTHONPATH={shlex.quote(str(REPO_ROOT))} "
        f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}"
    )
    return write_shell_plugin(directory, name, command)


def write_module_plugin(directory: Path, name: str, module: str) -> Path:
    """Write an executable wrapper running a plugin module with -m."""
    command = (
        f"exec env PYTHONPATH={shlex.quote(str(REPO_ROOT))} "
        f"{shlex.quote(sys.executable)} -m {module}"
    )
    return write_shell_plugin(directory, name, command)


@pytest.fixture
def plugin_dir(tmp_path):
    """Empty plugin directory."""
    directory = tmp_path / "plugins"
    directory.mkdir()
    return directory


@pytest.fixture
def dice_plugin(plugin_dir):
    """Executable running the bundled dice_roll plugin."""
    return write_module_plugin(plugin_dir, "dice_roll", "renoma.plugins.tools.dice_roll")


@pytest.fixture
def echo_plugin(plugin_dir):
    """Executable serving the echo and shout tools."""
    return write_python_plugin(plugin_dir, "echo_plugin", ECHO_PLUGIN_SOURCE)


@pytest.fixture
def rejecting_plugin(plugin_dir):
    """Executable answering every request with an error."""
    return write_python_plugin(plugin_dir, "rejecting", REJECTING_PLUGIN_SOURCE)


@pytest.fixture
def shell_plugin(plugin_dir):
    """Factory writing shell script plugins into the plugin directory."""

    def _write(name: str, body: str) -> Path:
        return write_shell_plugin(plugin_dir, name, body)

    return _write
