"""Arch Linux news reader that tracks read items and can guard pacman upgrades."""

__version__ = "0.2.2"