"""
Top-level package for the Pro Directory API.

All functionality lives in submodules under ``app``; the package
itself exports nothing so that imports such as
``pro_directory_api.app.main`` resolve when running from the project
root or from tests.
"""

__all__ = []
