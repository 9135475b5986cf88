"""Bundle local files into a single ZIP archive over HTTP."""

__version__ = "0.1.0"
