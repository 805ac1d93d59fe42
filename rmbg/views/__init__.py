"""
Views package for output handling
"""

from .writers import save_rgba

__all__ = ['save_rgba']
