"""Versionless route modules, mounted by ``eduportal.main``."""
