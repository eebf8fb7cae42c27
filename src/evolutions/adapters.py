"""
Changeset adapters.

Each adapter applies one changeset variant to a document and converts
engine failures into typed evolution errors. No exception leaves an
adapter.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable

from .json_patch import PatchError, apply_patch
from .models import (
    JSON_PATCH_CHANGESET,
    SPEC_EDIT_CHANGESET,
    Changeset,
    EvolutionResult,
    JsonPatchChangeset,
    PatchEvolutionError,
    SpecEditChangeset,
    SpecEditEvolutionError,
    UnexpectedEvolutionError,
)
from .spec_edit import SpecEditError, edit

logger = logging.getLogger(__name__)


def invalid_keys(document: Mapping[Any, Any]) -> list[Any]:
    """Top-level attribute names that are not strings."""
    return [key for key in document if not isinstance(key, str)]


def _unexpected(changeset: Changeset, error: Exception) -> EvolutionResult:
    logger.exception("Unexpected error applying changeset with version %s", changeset.version)
    return EvolutionResult.fail(UnexpectedEvolutionError(
        message=f"Unexpected error applying changeset with version {changeset.version}: {error!r}",
        version=changeset.version,
        error=error,
    ))


def _evolved(changeset: Changeset, document: Any) -> EvolutionResult:
    if not isinstance(document, dict):
        return EvolutionResult.fail(UnexpectedEvolutionError(
            message=(
                f"Changeset with version {changeset.version} produced "
                f"{type(document).__name__}, expected an object"
            ),
            version=changeset.version,
        ))

    invalid = invalid_keys(document)
    if invalid:
        return EvolutionResult.fail(UnexpectedEvolutionError(
            message=(
                f"Changeset with version {changeset.version} produced "
                f"attribute names that are not strings: {invalid!r}"
            ),
            version=changeset.version,
        ))
    return EvolutionResult.ok(document)


def apply_json_patch_changeset(
    document: dict[str, Any],
    changeset: JsonPatchChangeset
) -> EvolutionResult:
    """
    Apply a JSON Patch changeset.

    Every operation is validated against the document state at the point
    it is applied, so copy/move from a missing path fails.
    """
    try:
        patched = apply_patch(document, changeset.patch, validate=True)
    except PatchError as e:
        return EvolutionResult.fail(PatchEvolutionError(
            message=(
                f"Failed to apply JSON patch changeset with version "
                f"{changeset.version}: {e.message}"
            ),
            version=changeset.version,
            error=e,
        ))
    except Exception as e:
        return _unexpected(changeset, e)

    return _evolved(changeset, patched)


def apply_spec_edit_changeset(
    document: dict[str, Any],
    changeset: SpecEditChangeset
) -> EvolutionResult:
    """Apply a spec edit changeset."""
    try:
        edited = edit(document, changeset.spec)
    except SpecEditError as e:
        return EvolutionResult.fail(SpecEditEvolutionError(
            message=(
                f"Failed to apply spec edit changeset with version "
                f"{changeset.version}: {e}"
            ),
            version=changeset.version,
            error=e,
        ))
    except Exception as e:
        return _unexpected(changeset, e)

    return _evolved(changeset, edited)


# --- Adapter Dispatcher ---

CHANGESET_ADAPTERS: dict[str, Callable[[dict[str, Any], Any], EvolutionResult]] = {
    JSON_PATCH_CHANGESET: apply_json_patch_changeset,
    SPEC_EDIT_CHANGESET: apply_spec_edit_changeset,
}


def apply_changeset(document: dict[str, Any], changeset: Changeset) -> EvolutionResult:
    """
    Apply a single changeset with the adapter matching its type.

    Args:
        document: Current document state
        changeset: Changeset to apply

    Returns:
        EvolutionResult holding the new document or the typed failure
    """
    adapter = CHANGESET_ADAPTERS.get(changeset.type)
    if adapter is None:
        return EvolutionResult.fail(UnexpectedEvolutionError(
            message=f"Unsupported changeset type: {changeset.type!r}",
            version=changeset.version,
        ))

    return adapter(document, changeset)
