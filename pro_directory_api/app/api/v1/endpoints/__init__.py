"""
Endpoint modules for API v1.

Each module defines an ``APIRouter`` for one domain (accounts, fees,
taxonomy, audit); ``router.py`` mounts them under their prefixes.
"""
