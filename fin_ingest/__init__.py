"""Statement ingestion toolkit: delimited and PDF statements to normalized transactions."""

__all__ = ["__version__"]

__version__ = "0.1.0"
