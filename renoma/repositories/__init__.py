"""
Repository implementations for data access.

This package contains the local chat repository used when no external
storage backend is wired in.
"""

from renoma.repositories.local import *
