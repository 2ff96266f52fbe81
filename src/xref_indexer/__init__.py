"""
xref-indexer

Builds cross-reference indexes (term index, spec index, spec-metadata map) from
the definitions exported by web specifications.

Importing the package has no side effects: no config loading, no logging setup.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
