"""ONVIF device capability discovery and command dispatch."""

__version__ = "0.1.0"
