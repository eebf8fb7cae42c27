"""
Validation logic for JSON Patch operations.

Validates operations against the current document state before they
are applied, so failures are reported with a precise reason.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .models import (
    FROM_OPERATIONS,
    VALUE_OPERATIONS,
    PatchError,
    PatchErrorName,
    PatchOperation,
    PatchOperationType,
)
from .operations import array_index, delete_at_path, get_value_at_path, parse_path


def _require_members(
    op: PatchOperationType,
    has_from: bool,
    has_value: bool,
    index: int,
    raw: Any,
) -> None:
    if op in FROM_OPERATIONS and not has_from:
        raise PatchError(
            f"Operation '{op.value}' requires a 'from' pointer",
            PatchErrorName.OPERATION_FROM_REQUIRED,
            index,
            raw,
        )

    if op in VALUE_OPERATIONS and not has_value:
        raise PatchError(
            f"Operation '{op.value}' requires a value",
            PatchErrorName.OPERATION_VALUE_REQUIRED,
            index,
            raw,
        )


def parse_operation(raw: Any, index: int) -> PatchOperation:
    """
    Parse a raw operation mapping into a PatchOperation.

    Args:
        raw: Operation as supplied (mapping or PatchOperation)
        index: Index of the operation (for error reporting)

    Returns:
        The parsed operation

    Raises:
        PatchError: If the operation is structurally invalid
    """
    if isinstance(raw, PatchOperation):
        _require_members(raw.op, raw.from_ is not None, raw.has_value, index, raw)
        return raw

    if not isinstance(raw, Mapping):
        raise PatchError(
            "Operation is not an object",
            PatchErrorName.OPERATION_NOT_AN_OBJECT,
            index,
            raw,
        )

    try:
        op = PatchOperationType(raw.get("op"))
    except (ValueError, TypeError):
        raise PatchError(
            f"Operation 'op' must be one of {[t.value for t in PatchOperationType]}",
            PatchErrorName.OPERATION_OP_INVALID,
            index,
            raw,
        )

    if not isinstance(raw.get("path"), str):
        raise PatchError(
            "Operation 'path' must be a string",
            PatchErrorName.OPERATION_PATH_INVALID,
            index,
            raw,
        )

    _require_members(op, isinstance(raw.get("from"), str), "value" in raw, index, raw)

    try:
        return PatchOperation.model_validate(dict(raw))
    except ValidationError as e:
        raise PatchError(
            f"Invalid operation: {e.errors()[0]['msg']}",
            PatchErrorName.OPERATION_PATH_INVALID,
            index,
            raw,
        )


def validate_path_exists(
    obj: Any,
    path: str,
    operation: PatchOperation,
    index: int,
    name: PatchErrorName = PatchErrorName.OPERATION_PATH_UNRESOLVABLE,
) -> PatchError | None:
    """
    Validate that a path exists in the document.

    Args:
        obj: The document to check
        path: JSON Pointer path
        operation: The operation being validated
        index: Index of the operation (for error reporting)
        name: Reason to report if the path doesn't exist

    Returns:
        PatchError if path doesn't exist, None otherwise
    """
    try:
        get_value_at_path(obj, path)
        return None
    except (KeyError, IndexError, ValueError) as e:
        return PatchError(
            f"Path {path!r} does not exist: {e}",
            name,
            index,
            operation.model_dump(by_alias=True, exclude_unset=True),
        )


def validate_add_target(
    obj: Any,
    path: str,
    operation: PatchOperation,
    index: int,
) -> PatchError | None:
    """
    Validate that a value can be added at a path.

    The parent must exist and be a container; array positions must be
    numeric (or "-") and within bounds.

    Args:
        obj: The document to check
        path: JSON Pointer path
        operation: The operation being validated
        index: Index of the operation

    Returns:
        PatchError if the value cannot be added, None otherwise
    """
    segments = parse_path(path)
    if not segments:
        return None

    raw = operation.model_dump(by_alias=True, exclude_unset=True)
    parent_path = "".join("/" + s.replace("~", "~0").replace("/", "~1") for s in segments[:-1])
    try:
        parent = get_value_at_path(obj, parent_path)
    except (KeyError, IndexError, ValueError) as e:
        return PatchError(
            f"Cannot add at {path!r}, parent path does not exist: {e}",
            PatchErrorName.OPERATION_PATH_CANNOT_ADD,
            index,
            raw,
        )

    if isinstance(parent, dict):
        return None

    if isinstance(parent, list):
        try:
            array_index(segments[-1], len(parent), allow_end=True)
            return None
        except ValueError as e:
            return PatchError(
                str(e),
                PatchErrorName.OPERATION_PATH_ILLEGAL_ARRAY_INDEX,
                index,
                raw,
            )
        except IndexError as e:
            return PatchError(
                str(e),
                PatchErrorName.OPERATION_VALUE_OUT_OF_BOUNDS,
                index,
                raw,
            )

    return PatchError(
        f"Cannot add at {path!r}, parent is a {type(parent).__name__}",
        PatchErrorName.OPERATION_PATH_CANNOT_ADD,
        index,
        raw,
    )


def validate_move(
    obj: Any,
    operation: PatchOperation,
    index: int,
) -> list[PatchError]:
    """
    Validate a move operation.

    The source must exist, must not be a proper prefix of the destination,
    and the destination must accept the value once the source is removed.
    """
    err = validate_path_exists(
        obj, operation.from_, operation, index, PatchErrorName.OPERATION_FROM_UNRESOLVABLE
    )
    if err:
        return [err]

    if operation.path.startswith(operation.from_ + "/"):
        return [PatchError(
            f"Cannot move {operation.from_!r} into its own child {operation.path!r}",
            PatchErrorName.OPERATION_PATH_INVALID,
            index,
            operation.model_dump(by_alias=True, exclude_unset=True),
        )]

    if operation.from_ == operation.path:
        return []

    without_source, _ = delete_at_path(obj, operation.from_)
    err = validate_add_target(without_source, operation.path, operation, index)
    return [err] if err else []


def validate_operation(
    obj: Any,
    operation: PatchOperation,
    index: int,
) -> list[PatchError]:
    """
    Validate a single operation against the current document state.

    Args:
        obj: Current document state
        operation: Operation to validate
        index: Index of the operation

    Returns:
        List of patch errors (empty if valid)
    """
    errors: list[PatchError] = []

    if operation.op in {PatchOperationType.REMOVE, PatchOperationType.REPLACE}:
        if operation.op == PatchOperationType.REMOVE and operation.path == "":
            errors.append(PatchError(
                "Cannot remove the document root",
                PatchErrorName.OPERATION_PATH_INVALID,
                index,
                operation.model_dump(by_alias=True, exclude_unset=True),
            ))
        else:
            err = validate_path_exists(obj, operation.path, operation, index)
            if err:
                errors.append(err)

    if operation.op == PatchOperationType.ADD:
        err = validate_add_target(obj, operation.path, operation, index)
        if err:
            errors.append(err)

    if operation.op == PatchOperationType.COPY:
        err = validate_path_exists(
            obj, operation.from_, operation, index, PatchErrorName.OPERATION_FROM_UNRESOLVABLE
        )
        if err:
            errors.append(err)
        else:
            err = validate_add_target(obj, operation.path, operation, index)
            if err:
                errors.append(err)

    if operation.op == PatchOperationType.MOVE:
        errors.extend(validate_move(obj, operation, index))

    return errors
