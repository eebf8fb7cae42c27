"""
Declarative spec-based document editor.

A spec mirrors the shape of the document it edits. Keys starting with "$"
are commands applied to the value at that position; any other key descends
into the attribute (or array index) of the same name.

Commands:
    - $set: Replace the target with the value
    - $unset: Remove the listed keys from an object
    - $merge: Shallow-merge an object into an object
    - $push: Append the listed items to an array
    - $unshift: Prepend the listed items, one at a time, to an array
    - $splice: Apply [start, delete_count, *items] splices to an array
    - $apply: Replace the target with fn(target)
    - $toggle: Negate the listed boolean attributes of an object

Example:
    >>> edit({"tags": ["a"]}, {"tags": {"$push": ["b"]}, "isEnabled": {"$set": True}})
    {'tags': ['a', 'b'], 'isEnabled': True}
"""

from collections.abc import Mapping
from copy import deepcopy
from typing import Any, Callable

from .json_patch.operations import ARRAY_INDEX_PATTERN

# Placeholder for an attribute the target does not have
MISSING = object()

COMMAND_PREFIX = "$"


class SpecEditError(ValueError):
    """
    Raised when a spec cannot be applied to a document.

    Attributes:
        path: Location in the document where the spec failed
    """

    def __init__(self, message: str, path: str = ""):
        super().__init__(f"{message} (at '{path or '/'}')")
        self.message = message
        self.path = path


def _describe(value: Any) -> str:
    if value is MISSING:
        return "a missing attribute"
    if value is None:
        return "null"
    return type(value).__name__


def _expect_object(command: str, target: Any, path: str) -> dict:
    if not isinstance(target, dict):
        raise SpecEditError(
            f"expected target of {command} to be an object; got {_describe(target)}", path
        )
    return target


def _expect_array(command: str, target: Any, path: str) -> list:
    if not isinstance(target, list):
        raise SpecEditError(
            f"expected target of {command} to be an array; got {_describe(target)}", path
        )
    return target


def _expect_list_argument(command: str, argument: Any, path: str) -> list:
    if not isinstance(argument, list):
        raise SpecEditError(
            f"expected spec of {command} to be an array; got {_describe(argument)}", path
        )
    return argument


def _expect_attribute_names(command: str, argument: Any, path: str) -> list:
    names = _expect_list_argument(command, argument, path)
    for name in names:
        if not isinstance(name, str):
            raise SpecEditError(
                f"expected spec of {command} to list attribute names; got {name!r}", path
            )
    return names


# --- Command Handlers ---

def command_set(target: Any, argument: Any, path: str) -> Any:
    """Replace the target."""
    return deepcopy(argument)


def command_unset(target: Any, argument: Any, path: str) -> dict:
    """Remove keys from an object. Absent keys are ignored."""
    result = dict(_expect_object("$unset", target, path))
    for key in _expect_attribute_names("$unset", argument, path):
        result.pop(key, None)
    return result


def command_merge(target: Any, argument: Any, path: str) -> dict:
    """Shallow-merge an object into the target object."""
    result = _expect_object("$merge", target, path)
    if not isinstance(argument, Mapping):
        raise SpecEditError(
            f"expected spec of $merge to be an object; got {_describe(argument)}", path
        )
    return {**result, **deepcopy(dict(argument))}


def command_push(target: Any, argument: Any, path: str) -> list:
    """Append items to the target array."""
    result = _expect_array("$push", target, path)
    return result + deepcopy(_expect_list_argument("$push", argument, path))


def command_unshift(target: Any, argument: Any, path: str) -> list:
    """Prepend items one at a time, so the last item ends up first."""
    result = list(_expect_array("$unshift", target, path))
    for item in _expect_list_argument("$unshift", argument, path):
        result.insert(0, deepcopy(item))
    return result


def command_splice(target: Any, argument: Any, path: str) -> list:
    """
    Apply splices to the target array.

    Each splice is [start, delete_count, *items]. A negative start counts
    from the end; an omitted delete_count removes everything from start.
    """
    result = list(_expect_array("$splice", target, path))

    for splice in _expect_list_argument("$splice", argument, path):
        if (
            not isinstance(splice, list)
            or not splice
            or not all(isinstance(n, int) and not isinstance(n, bool) for n in splice[:2])
        ):
            raise SpecEditError(
                f"expected each $splice entry to be [start, delete_count, *items]; got {splice!r}",
                path,
            )

        start = splice[0]
        if start < 0:
            start = max(len(result) + start, 0)
        start = min(start, len(result))
        end = start + splice[1] if len(splice) > 1 else len(result)
        result[start:max(end, start)] = deepcopy(splice[2:])

    return result


def command_apply(target: Any, argument: Any, path: str) -> Any:
    """Replace the target with the result of calling the function on it."""
    if not callable(argument):
        raise SpecEditError(
            f"expected spec of $apply to be a function; got {_describe(argument)}", path
        )
    return argument(None if target is MISSING else target)


def command_toggle(target: Any, argument: Any, path: str) -> dict:
    """Negate boolean attributes of the target object."""
    result = dict(_expect_object("$toggle", target, path))
    for key in _expect_attribute_names("$toggle", argument, path):
        result[key] = not result.get(key)
    return result


# --- Command Dispatcher ---

COMMAND_HANDLERS: dict[str, Callable[[Any, Any, str], Any]] = {
    "$set": command_set,
    "$unset": command_unset,
    "$merge": command_merge,
    "$push": command_push,
    "$unshift": command_unshift,
    "$splice": command_splice,
    "$apply": command_apply,
    "$toggle": command_toggle,
}


def _is_command(key: Any) -> bool:
    return isinstance(key, str) and key.startswith(COMMAND_PREFIX)


def _list_index(key: Any, target: list, path: str) -> int:
    if isinstance(key, int) and not isinstance(key, bool):
        index = key
    elif isinstance(key, str) and ARRAY_INDEX_PATTERN.match(key):
        index = int(key)
    else:
        raise SpecEditError(f"expected an array index; got {key!r}", path)

    if not 0 <= index < len(target):
        raise SpecEditError(f"array index {index} out of bounds (length {len(target)})", path)
    return index


def _apply_commands(target: Any, spec: Mapping, path: str) -> Any:
    if len(spec) > 1 and "$set" in spec:
        raise SpecEditError("$set cannot be combined with other commands", path)

    result = target
    for command, argument in spec.items():
        handler = COMMAND_HANDLERS.get(command)
        if handler is None:
            raise SpecEditError(f"unknown command {command!r}", path)
        result = handler(result, argument, path)
    return result


def _update(target: Any, spec: Any, path: str) -> Any:
    if not isinstance(spec, Mapping):
        raise SpecEditError(f"expected spec to be an object; got {_describe(spec)}", path)

    commands = [key for key in spec if _is_command(key)]
    if commands:
        if len(commands) != len(spec):
            raise SpecEditError("commands cannot be combined with attribute keys", path)
        return _apply_commands(target, spec, path)

    if not spec:
        return target

    if isinstance(target, dict):
        result = dict(target)
        for key, child_spec in spec.items():
            child = _update(result.get(key, MISSING), child_spec, f"{path}/{key}")
            if child is not MISSING:
                result[key] = child
        return result

    if isinstance(target, list):
        result = list(target)
        for key, child_spec in spec.items():
            index = _list_index(key, result, path)
            result[index] = _update(result[index], child_spec, f"{path}/{index}")
        return result

    raise SpecEditError(f"cannot descend into {_describe(target)}", path)


def edit(document: Any, spec: Mapping) -> Any:
    """
    Apply a spec to a document.

    Args:
        document: The document to edit (never modified)
        spec: Nested commands mirroring the document shape

    Returns:
        New document with the spec applied

    Raises:
        SpecEditError: If the spec is malformed or does not fit the document
    """
    return _update(deepcopy(document), spec, "")
