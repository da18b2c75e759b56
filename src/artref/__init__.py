"""artref: in-memory index and query service for tagged reference image folders."""

__version__ = "0.1.0"
