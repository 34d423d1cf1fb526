"""
Plugin system for the Renoma host.

This package provides the wire protocol, the per-process plugin transport,
the plugin manager that routes tools across processes, and the runtime used
to write plugin executables in Python.
"""
