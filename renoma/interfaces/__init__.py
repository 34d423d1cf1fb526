"""
Abstract interfaces for the Renoma plugin host.

These interfaces define the contracts that concrete implementations
must adhere to, following the Dependency Inversion Principle.

This package contains:
- Plugin interfaces for the subprocess transport and the tool router
- Provider interfaces for the completion client
- Repository interfaces for chat storage
- Service interfaces for the orchestration loop
"""
