# -----------------------------------------------------------------------------
# POLICY EXPORT
# -----------------------------------------------------------------------------
# Exports a locked Chef policy (Policyfile.lock.json) into a standalone repo
# that chef-zero can serve: a directory tree or a single .tgz archive.
# -----------------------------------------------------------------------------

from .core import ExportRepo, PolicyExportError

__version__ = "0.1.0"

__all__ = ["ExportRepo", "PolicyExportError", "__version__"]
