"""Plotting helpers and multi-group drivers for the opponent-channel model."""
