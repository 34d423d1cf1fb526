"""
Adapters for external systems and services.

These adapters implement the interfaces defined in renoma.interfaces
and provide concrete implementations for interacting with external systems.
"""
