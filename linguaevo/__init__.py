"""Vocabulary management core: runtime helpers, entities, repository and service layers."""

__version__ = "0.1.0"