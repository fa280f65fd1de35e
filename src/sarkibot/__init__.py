"""sarkibot - slot-filling dialog engine for personalized song orders."""

__version__ = "0.1.0"
