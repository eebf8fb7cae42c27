"""
JSON Patch service.

Main entry point for applying JSON Patch documents.
Patches are applied atomically - the input document is never modified
and a failing operation discards every intermediate state.
"""

from copy import deepcopy
from typing import Any, Sequence

from .models import PatchError, PatchErrorName
from .operations import apply_operation
from .validation import parse_operation, validate_operation


def _require_sequence(operations: Any) -> None:
    if not isinstance(operations, (list, tuple)):
        raise PatchError(
            "Patch must be a sequence of operations",
            PatchErrorName.SEQUENCE_NOT_AN_ARRAY,
            operation=operations,
        )


def validate_patch(obj: Any, operations: Sequence[Any]) -> list[PatchError]:
    """
    Validate all operations in a patch without applying them.

    This performs a "dry run" that simulates the patch so every operation
    is checked against the state produced by the operations before it.

    Args:
        obj: The base document to validate against
        operations: The patch operations to validate

    Returns:
        List of patch errors (empty if all valid)

    Example:
        >>> errors = validate_patch(document, [{"op": "remove", "path": "/missing"}])
        >>> errors[0].name
        <PatchErrorName.OPERATION_PATH_UNRESOLVABLE: 'OPERATION_PATH_UNRESOLVABLE'>
    """
    try:
        _require_sequence(operations)
    except PatchError as e:
        return [e]

    all_errors: list[PatchError] = []
    current = deepcopy(obj)

    for i, raw in enumerate(operations):
        try:
            operation = parse_operation(raw, i)
        except PatchError as e:
            all_errors.append(e)
            continue

        errors = validate_operation(current, operation, i)
        all_errors.extend(errors)

        # If this operation is valid, apply it to current for next validation
        if not errors:
            try:
                current = apply_operation(current, operation)
            except PatchError as e:
                e.index, e.operation = i, raw
                all_errors.append(e)
            except (KeyError, IndexError, ValueError, TypeError) as e:
                all_errors.append(PatchError(
                    f"Simulation failed: {e}",
                    PatchErrorName.OPERATION_PATH_UNRESOLVABLE,
                    i,
                    raw,
                ))

    return all_errors


def apply_patch(
    obj: Any,
    operations: Sequence[Any],
    validate: bool = True
) -> Any:
    """
    Apply a JSON Patch to a document.

    Args:
        obj: The base document
        operations: Ordered patch operations (mappings or PatchOperation)
        validate: Whether to validate each operation against the current
            document state before applying it (default True)

    Returns:
        New document with every operation applied

    Raises:
        PatchError: On the first operation that cannot be applied

    Example:
        >>> apply_patch({"a": 1}, [{"op": "copy", "from": "/a", "path": "/b"}])
        {'a': 1, 'b': 1}
    """
    _require_sequence(operations)

    current = obj
    for i, raw in enumerate(operations):
        operation = parse_operation(raw, i)

        if validate:
            errors = validate_operation(current, operation, i)
            if errors:
                raise errors[0]

        try:
            current = apply_operation(current, operation)
        except PatchError as e:
            e.index, e.operation = i, raw
            raise
        except (KeyError, IndexError, ValueError, TypeError) as e:
            raise PatchError(
                f"Failed to apply operation {i}: {e}",
                PatchErrorName.OPERATION_PATH_UNRESOLVABLE,
                i,
                raw,
            ) from e

    return current if operations else deepcopy(obj)
