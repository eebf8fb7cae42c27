"""
JSON Patch Engine

Applies RFC 6902 JSON Patch documents to JSON-like values without
mutating them. Operations are validated against the document state
at the point of application.
"""

from .models import (
    PatchError,
    PatchErrorName,
    PatchOperation,
    PatchOperationType,
)
from .service import (
    apply_patch,
    validate_patch,
)

__all__ = [
    "PatchError",
    "PatchErrorName",
    "PatchOperation",
    "PatchOperationType",
    "apply_patch",
    "validate_patch",
]
