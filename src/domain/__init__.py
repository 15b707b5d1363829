"""Domain layer: errors and schemas."""

from .errors import ErrorCodes, HelperError, SiteError
from .schemas import PageTarget, ResolvedBundle, TargetKind

__all__ = [
    "SiteError",
    "HelperError",
    "ErrorCodes",
    "PageTarget",
    "ResolvedBundle",
    "TargetKind",
]
