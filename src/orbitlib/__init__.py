"""Core library for orbit.

Contains configuration loading, the schema registry client and error
formatting shared by the CLI and the TUI.
"""

__all__ = [
    "clients",
    "config",
    "errors",
]
