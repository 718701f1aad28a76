"""Core building blocks: roles, session, access gate, validation, schemas."""
