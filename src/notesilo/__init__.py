"""notesilo: local-first markdown notes."""

__version__ = "0.1.0"
