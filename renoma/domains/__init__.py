"""
Domain models for the Renoma plugin host.

This package contains the core domain models that represent plugins,
tools and chat messages.
"""

from renoma.domains.messages import *
from renoma.domains.plugins import *
