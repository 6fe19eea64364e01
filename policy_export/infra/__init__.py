# -----------------------------------------------------------------------------
# INFRASTRUCTURE LAYER
# -----------------------------------------------------------------------------
# Contains low-level infrastructure wrappers:
# - write_tgz: Deterministic compressed tarball writer
# -----------------------------------------------------------------------------

from .archive import walk_sorted, write_tgz

__all__ = ["walk_sorted", "write_tgz"]
