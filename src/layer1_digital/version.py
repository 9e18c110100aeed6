"""Version information for the Layer1 Digital SDK"""

__version__ = "1.0.0"
