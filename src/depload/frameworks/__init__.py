"""Target framework model: descriptors, compatibility rules and nearest-match reduction."""

from .models import FrameworkDescriptor, FrameworkIdentifiers
from .compatibility import get_nearest, is_compatible

__all__ = [
    "FrameworkDescriptor",
    "FrameworkIdentifiers",
    "get_nearest",
    "is_compatible",
]
