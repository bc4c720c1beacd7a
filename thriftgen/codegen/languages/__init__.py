"""
Language-specific code generators.
"""

from .scala import ScalaGenerator

__all__ = ["ScalaGenerator"]
