"""Model catalog parsing and selection."""

from .selection import ModelSelector, filter_catalog, parse_model_version

__all__ = ["ModelSelector", "filter_catalog", "parse_model_version"]
