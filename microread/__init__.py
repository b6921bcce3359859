"""Microread: bite-sized daily reading of long-form books."""

__version__ = "1.0.0"
