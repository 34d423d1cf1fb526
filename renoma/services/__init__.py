"""
Service implementations for the Renoma plugin host.

These services implement the business logic interfaces defined in
renoma.interfaces.services.
"""

from renoma.services.completion import *
