"""relflow: run configurable release workflows against a Git repository."""

__version__ = "0.1.0"
