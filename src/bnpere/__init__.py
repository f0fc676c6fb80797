"""Employee savings sync job."""

__version__ = "0.1.0"
