"""EduPortal: role-based academic administration over a hosted backend."""

__version__ = "0.1.0"
