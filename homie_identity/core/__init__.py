"""Core primitives: credentials, errors, logging and request security."""
