"""dotboot — ordered, idempotent workstation bootstrap."""

__version__ = "0.1.0"
