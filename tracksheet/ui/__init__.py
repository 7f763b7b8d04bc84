"""
Qt widgets, dialogs and the main window.
"""
from .windows import MainWindow

__all__ = ['MainWindow']
