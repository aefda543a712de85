"""Init module."""
from .resource_data import ResourceData

__all__ = ["ResourceData"]
