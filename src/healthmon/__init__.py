"""Agent Health Monitor: score, diagnose and improve development agents."""

__version__ = "1.0.0"
