"""
CMTV terminal UI
"""

from .app import CMTVApp, run_app

__all__ = ['CMTVApp', 'run_app']
