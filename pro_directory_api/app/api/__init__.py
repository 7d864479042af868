"""
API package containing versioned routes.

Each version subpackage (currently ``v1``) exposes a top-level
``router`` that includes its domain routers.
"""
