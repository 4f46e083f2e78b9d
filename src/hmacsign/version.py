"""Version information for hmacsign"""

__version__ = "0.1.0"
