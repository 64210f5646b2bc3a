"""CVA Enduro batch post-storage workflows."""

__version__ = "0.1.0"
