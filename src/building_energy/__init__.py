"""Building energy anomaly detection and insights."""

__version__ = "0.1.0"
