"""QQ processor for a multi-platform chat relay bridge."""

__version__ = "0.1.0"
