"""Upload debug-symbol artifacts (dSYMs, mapping files) to an observability service."""

__version__ = "0.1.0"
