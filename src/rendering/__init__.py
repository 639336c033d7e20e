"""
Rendering of export overlays.
"""

from .overlay import OverlayRenderer, OverlayStyle

__all__ = ["OverlayRenderer", "OverlayStyle"]
