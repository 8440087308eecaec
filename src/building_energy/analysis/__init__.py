"""Anomaly detection and derived insights."""
