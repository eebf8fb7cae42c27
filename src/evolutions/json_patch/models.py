"""
Pydantic models for JSON Patch documents.

Follows JSON Patch (RFC 6902) structure over JSON Pointer (RFC 6901) paths.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PatchOperationType(str, Enum):
    """Supported JSON Patch operations."""

    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    MOVE = "move"
    COPY = "copy"
    TEST = "test"


# Operations that carry a "value" member
VALUE_OPERATIONS = {
    PatchOperationType.ADD,
    PatchOperationType.REPLACE,
    PatchOperationType.TEST,
}

# Operations that carry a "from" member
FROM_OPERATIONS = {
    PatchOperationType.MOVE,
    PatchOperationType.COPY,
}


class PatchErrorName(str, Enum):
    """Machine-readable reason a patch operation was rejected."""

    SEQUENCE_NOT_AN_ARRAY = "SEQUENCE_NOT_AN_ARRAY"
    OPERATION_NOT_AN_OBJECT = "OPERATION_NOT_AN_OBJECT"
    OPERATION_OP_INVALID = "OPERATION_OP_INVALID"
    OPERATION_PATH_INVALID = "OPERATION_PATH_INVALID"
    OPERATION_FROM_REQUIRED = "OPERATION_FROM_REQUIRED"
    OPERATION_VALUE_REQUIRED = "OPERATION_VALUE_REQUIRED"
    OPERATION_PATH_CANNOT_ADD = "OPERATION_PATH_CANNOT_ADD"
    OPERATION_PATH_UNRESOLVABLE = "OPERATION_PATH_UNRESOLVABLE"
    OPERATION_FROM_UNRESOLVABLE = "OPERATION_FROM_UNRESOLVABLE"
    OPERATION_PATH_ILLEGAL_ARRAY_INDEX = "OPERATION_PATH_ILLEGAL_ARRAY_INDEX"
    OPERATION_VALUE_OUT_OF_BOUNDS = "OPERATION_VALUE_OUT_OF_BOUNDS"
    TEST_OPERATION_FAILED = "TEST_OPERATION_FAILED"


class PatchError(Exception):
    """
    Raised when a patch operation cannot be applied.

    Attributes:
        name: Reason the operation was rejected
        index: Position of the failing operation in the patch (if known)
        operation: The failing operation as supplied
    """

    def __init__(
        self,
        message: str,
        name: PatchErrorName,
        index: Optional[int] = None,
        operation: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.name = name
        self.index = index
        self.operation = operation

    def __repr__(self) -> str:
        return f"PatchError(name={self.name.value!r}, index={self.index!r}, message={self.message!r})"


class PatchOperation(BaseModel):
    """
    A single JSON Patch operation.

    Follows RFC 6902 structure:
        - op: The operation to perform
        - path: JSON Pointer to the target location
        - from: JSON Pointer to the source location (move/copy)
        - value: The operand (add/replace/test)

    Examples:
        Add attribute:
            {"op": "add", "path": "/isEnabled", "value": True}

        Copy attribute:
            {"op": "copy", "from": "/defaultFields", "path": "/fieldConfiguration/defaultUserFields"}
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    op: PatchOperationType = Field(
        ...,
        description="The operation to perform"
    )
    path: str = Field(
        ...,
        description="JSON Pointer to the target (e.g., '/fieldConfiguration/defaultUserFields')"
    )
    from_: Optional[str] = Field(
        default=None,
        alias="from",
        description="JSON Pointer to the source (required for move/copy)"
    )
    value: Any = Field(
        default=None,
        description="The operand (required for add/replace/test, may be null)"
    )

    @field_validator("path", "from_")
    @classmethod
    def validate_pointer_format(cls, v: Optional[str]) -> Optional[str]:
        """Pointers are either the root ('') or start with '/'."""
        if v and not v.startswith("/"):
            raise ValueError("JSON Pointer must be empty or start with '/'")
        return v

    @property
    def has_value(self) -> bool:
        """Whether a value member was supplied (null counts as supplied)."""
        return "value" in self.model_fields_set
