"""Tk user interface pieces for the power anomaly dashboard."""
