"""Neonatal vital-sign monitoring.

This package contains the monitoring domain (channels, thresholds, readings)
and the services built on it, isolated from the backend adapters for easy
testing and reasoning.
"""
