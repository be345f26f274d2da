"""
Application package for the School Registry server.

The package is split the same way the request flows through it:
``core`` holds configuration, logging, errors and the database
bootstrap; ``services`` the entity store and the enrollment rules;
``schemas`` the pydantic models; ``api`` the method table and the
per-connection protocol loop.  ``main`` ties them together.
"""

from .main import RegistryServer, create_server  # noqa: F401
