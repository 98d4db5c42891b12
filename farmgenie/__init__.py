"""FarmGenie voice client - ask the crop advisory backend by voice or text."""

__version__ = "0.1.0"
