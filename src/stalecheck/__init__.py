"""stalecheck: static staleTime policy auditor for JS/TS codebases."""

__version__ = "0.1.0"
