"""Stroll Planner: AI-assisted walking routes over the 2GIS catalog."""

__version__ = "0.1.0"
