"""Utility modules for repo relay."""

from .single_flight import SingleFlight

__all__ = ["SingleFlight"]
