"""
JSON Patch operation handlers.

Each operation is implemented as a pure function that takes the current
document state and returns a new state. No mutations of the input document.
"""

import re
from copy import deepcopy
from typing import Any

from .models import PatchError, PatchErrorName, PatchOperation, PatchOperationType

ARRAY_INDEX_PATTERN = re.compile(r"^(0|[1-9][0-9]*)$")

# JSON Pointer token addressing the position past the last array element
END_OF_ARRAY = "-"


def parse_path(path: str) -> list[str]:
    """
    Parse a JSON Pointer path into unescaped segments.

    Args:
        path: JSON Pointer (e.g., "/fieldConfiguration/defaultUserFields")

    Returns:
        List of path segments (e.g., ["fieldConfiguration", "defaultUserFields"])
    """
    if path == "":
        return []
    # Remove leading slash, split, then decode ~1 before ~0
    return [
        segment.replace("~1", "/").replace("~0", "~")
        for segment in path[1:].split("/")
    ]


def array_index(segment: str, length: int, allow_end: bool = False) -> int:
    """
    Resolve a path segment to an index into an array of the given length.

    Args:
        segment: Path segment addressing an array element
        length: Current length of the array
        allow_end: Whether the index may address the position past the end

    Raises:
        ValueError: If the segment is not a valid array index
        IndexError: If the index is out of bounds
    """
    if segment == END_OF_ARRAY:
        if allow_end:
            return length
        raise IndexError("'-' does not address an existing array element")

    if not ARRAY_INDEX_PATTERN.match(segment):
        raise ValueError(f"Illegal array index: {segment!r}")

    index = int(segment)
    upper = length if allow_end else length - 1
    if index > upper:
        raise IndexError(f"Array index {index} out of bounds (length {length})")
    return index


def _step(current: Any, segment: str) -> Any:
    if isinstance(current, list):
        return current[array_index(segment, len(current))]
    if isinstance(current, dict):
        return current[segment]
    raise KeyError(f"Cannot traverse into {type(current).__name__} at {segment!r}")


def get_value_at_path(obj: Any, path: str) -> Any:
    """
    Get value at a JSON Pointer path.

    Args:
        obj: The document to traverse
        path: JSON Pointer path

    Returns:
        Value at the path

    Raises:
        KeyError: If path doesn't exist
        IndexError: If array index is out of bounds
        ValueError: If an array is addressed with a non-numeric segment
    """
    current = obj
    for segment in parse_path(path):
        current = _step(current, segment)
    return current


def _navigate_to_parent(obj: Any, segments: list[str]) -> Any:
    current = obj
    for segment in segments[:-1]:
        current = _step(current, segment)
    if not isinstance(current, (dict, list)):
        raise KeyError(f"Parent of {segments[-1]!r} is not a container")
    return current


def set_value_at_path(obj: Any, path: str, value: Any) -> tuple[Any, Any]:
    """
    Replace an existing value at a JSON Pointer path (immutable).

    Args:
        obj: The original document
        path: JSON Pointer path
        value: New value to set

    Returns:
        Tuple of (new document with value set, previous value)

    Raises:
        KeyError: If path doesn't exist
    """
    segments = parse_path(path)
    if not segments:
        return deepcopy(value), deepcopy(obj)

    result = deepcopy(obj)
    current = _navigate_to_parent(result, segments)

    final_segment = segments[-1]
    if isinstance(current, list):
        index = array_index(final_segment, len(current))
        previous = current[index]
        current[index] = deepcopy(value)
    else:
        previous = current[final_segment]
        current[final_segment] = deepcopy(value)

    return result, previous


def delete_at_path(obj: Any, path: str) -> tuple[Any, Any]:
    """
    Delete value at a JSON Pointer path (immutable).

    Args:
        obj: The original document
        path: JSON Pointer path

    Returns:
        Tuple of (new document with value deleted, deleted value)
    """
    segments = parse_path(path)
    if not segments:
        raise ValueError("Cannot delete root object")

    result = deepcopy(obj)
    current = _navigate_to_parent(result, segments)

    final_segment = segments[-1]
    if isinstance(current, list):
        index = array_index(final_segment, len(current))
        previous = current.pop(index)
    else:
        previous = current.pop(final_segment)

    return result, previous


def insert_at_path(obj: Any, path: str, value: Any) -> Any:
    """
    Insert value at a JSON Pointer path.

    Objects gain (or overwrite) the member; arrays shift elements right,
    with "-" appending.

    Args:
        obj: The original document
        path: JSON Pointer path
        value: Value to insert

    Returns:
        New document with value inserted
    """
    segments = parse_path(path)
    if not segments:
        return deepcopy(value)

    result = deepcopy(obj)
    current = _navigate_to_parent(result, segments)

    final_segment = segments[-1]
    if isinstance(current, list):
        current.insert(array_index(final_segment, len(current), allow_end=True), deepcopy(value))
    else:
        current[final_segment] = deepcopy(value)

    return result


def json_equal(left: Any, right: Any) -> bool:
    """Compare two JSON values; booleans never equal numbers."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(
            json_equal(left[key], right[key]) for key in left
        )
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(
            json_equal(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    return type(left) is type(right) and left == right


# --- Operation Handlers ---

def apply_add(obj: Any, operation: PatchOperation) -> Any:
    """Apply an add operation."""
    return insert_at_path(obj, operation.path, operation.value)


def apply_remove(obj: Any, operation: PatchOperation) -> Any:
    """Apply a remove operation."""
    result, _ = delete_at_path(obj, operation.path)
    return result


def apply_replace(obj: Any, operation: PatchOperation) -> Any:
    """Apply a replace operation."""
    result, _ = set_value_at_path(obj, operation.path, operation.value)
    return result


def apply_move(obj: Any, operation: PatchOperation) -> Any:
    """
    Move a value to a new location.

    Equivalent to removing the value at "from" and adding it at "path".
    """
    if operation.from_ == operation.path:
        return deepcopy(obj)
    result, value = delete_at_path(obj, operation.from_)
    return insert_at_path(result, operation.path, value)


def apply_copy(obj: Any, operation: PatchOperation) -> Any:
    """Copy the value at "from" to "path"."""
    value = get_value_at_path(obj, operation.from_)
    return insert_at_path(obj, operation.path, value)


def apply_test(obj: Any, operation: PatchOperation) -> Any:
    """
    Assert that the value at "path" equals the operand.

    Raises:
        PatchError: If the values differ or the path doesn't exist
    """
    try:
        actual = get_value_at_path(obj, operation.path)
    except (KeyError, IndexError, ValueError):
        raise PatchError(
            f"Test operation failed: {operation.path!r} does not exist",
            PatchErrorName.TEST_OPERATION_FAILED,
        )

    if not json_equal(actual, operation.value):
        raise PatchError(
            f"Test operation failed: value at {operation.path!r} is {actual!r}, "
            f"expected {operation.value!r}",
            PatchErrorName.TEST_OPERATION_FAILED,
        )
    return deepcopy(obj)


# --- Operation Dispatcher ---

OPERATION_HANDLERS = {
    PatchOperationType.ADD: apply_add,
    PatchOperationType.REMOVE: apply_remove,
    PatchOperationType.REPLACE: apply_replace,
    PatchOperationType.MOVE: apply_move,
    PatchOperationType.COPY: apply_copy,
    PatchOperationType.TEST: apply_test,
}


def apply_operation(obj: Any, operation: PatchOperation) -> Any:
    """
    Apply a single patch operation.

    Args:
        obj: Current document state
        operation: Operation to apply

    Returns:
        New document state

    Raises:
        ValueError: If operation is not supported
    """
    handler = OPERATION_HANDLERS.get(operation.op)
    if handler is None:
        raise ValueError(f"Unsupported operation: {operation.op}")

    return handler(obj, operation)
