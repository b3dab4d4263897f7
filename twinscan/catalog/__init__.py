"""Identity catalog package for twinscan.

- FileCatalog: Consumes FileHandles one at a time and groups byte-identical
  physical files into DuplicateSets.
"""

from .file_catalog import FileCatalog

__all__ = ["FileCatalog"]
