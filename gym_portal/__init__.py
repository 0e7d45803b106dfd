"""Gym Portal - membership, pricing plan and payment API."""

from gym_portal.version import __version__

__all__ = ["__version__"]
