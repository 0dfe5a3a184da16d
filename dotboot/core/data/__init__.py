"""
Static data for dotboot.

    from dotboot.core.data import DEFAULT_UNITS
"""

from dotboot.core.data.units import DEFAULT_UNITS

__all__ = ["DEFAULT_UNITS"]
