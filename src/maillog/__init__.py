"""maillog - versioned schema migrations for the mail log table."""

__version__ = "1.0.0"
