"""Version 1 of the Pro Directory API."""
