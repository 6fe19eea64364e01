# -----------------------------------------------------------------------------
# DOMAIN LAYER
# -----------------------------------------------------------------------------
# Pydantic models for the policy lock being exported and the export request,
# plus the per-transaction context handed from stage to stage.
# -----------------------------------------------------------------------------

from .models import CookbookLock, ExportContext, ExportRequest, PolicyLock

__all__ = ["CookbookLock", "ExportContext", "ExportRequest", "PolicyLock"]
