"""
speccascade - cascading spec resolution and content-addressed generation history

Spec documents (YAML frontmatter plus free-text instructions) cascade through
a directory hierarchy into one resolved configuration per target artifact;
every generated artifact is recorded in an append-only, hash-addressed store.
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
