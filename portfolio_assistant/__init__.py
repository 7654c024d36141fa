"""Portfolio Assistant: retrieval-grounded chat over a personal portfolio."""

__version__ = "1.0.0"
