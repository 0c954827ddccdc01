"""JobFlow - in-memory job listing browser over a read-only job API."""

__version__ = "0.1.0"
