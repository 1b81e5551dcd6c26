"""Core type definitions."""

from typing import NewType

# URL path sent to clients (e.g., "/guide/")
# Distinct from filesystem paths to catch type mismatches
URLPath = NewType("URLPath", str)
