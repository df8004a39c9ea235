"""
binforge Command-Line Interface
===============================

- **binforge**: compile a layout script into a binary image

Implemented as a Click application with help text and structured error
reporting.
"""

__all__ = ["binforge"]
