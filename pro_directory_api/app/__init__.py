"""
Application package for the Pro Directory API.

``core`` holds configuration, logging, database and security helpers,
``services`` the account, fee, category and taxonomy logic, ``schemas``
the pydantic models and ``api/v1`` the HTTP routers.
"""

from .main import app  # noqa: F401
