"""
Emission Module — Header-first, lazy statemap output.
"""

from .cursor import CursorState, EmissionCursor

__all__ = ["EmissionCursor", "CursorState"]
