"""StayOps: short-term-rental operations over a hosted backend."""

__version__ = "0.1.0"
