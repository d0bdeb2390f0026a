"""Multi-document PDF splitting worker."""

__version__ = "0.1.0"
