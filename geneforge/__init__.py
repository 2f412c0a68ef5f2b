"""geneforge: a generic evolutionary computation engine."""

__version__ = "0.1.0"
