"""Multi-tenant form submission and grading service."""
__version__ = "1.0.0"
