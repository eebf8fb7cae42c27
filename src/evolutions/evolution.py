"""
Evolution driver.

Main entry point for bringing a stored document up to the latest version
of its changelog at read time. Evolution is atomic - the caller receives
either the fully evolved document or a single typed error, and the input
document is never modified.
"""

import logging
from collections.abc import Mapping
from copy import deepcopy
from functools import reduce
from typing import Any, Callable, Optional, Sequence

from .adapters import apply_changeset, invalid_keys
from .changelog import (
    BASE_VERSION,
    duplicate_versions,
    latest_version,
    load_changelog,
    pending_changesets,
    sort_changelog,
)
from .config import settings
from .models import Changeset, EvolutionResult, UnexpectedEvolutionError

logger = logging.getLogger(__name__)


def _fold_changeset(accumulated: EvolutionResult, changeset: Changeset) -> EvolutionResult:
    # Short-circuit: once a changeset fails no further adapters run
    if not accumulated.success:
        return accumulated

    step = apply_changeset(accumulated.document, changeset)
    if not step.success:
        return EvolutionResult.fail(
            step.error,
            from_version=accumulated.from_version,
            changesets_applied=accumulated.changesets_applied,
        )

    logger.debug("Applied %s changeset with version %s", changeset.type, changeset.version)
    return EvolutionResult.ok(
        step.document,
        from_version=accumulated.from_version,
        changesets_applied=accumulated.changesets_applied + 1,
    )


def _document_version(document: Mapping[str, Any], version_key: str) -> Any:
    return document.get(version_key, BASE_VERSION)


def evolve(
    changelog: Sequence[Any],
    version_key: Optional[str] = None,
) -> Callable[[Mapping[str, Any]], EvolutionResult]:
    """
    Build an evolution that brings documents up to the changelog's latest version.

    The changelog is sorted by version and changesets already applied to
    a document are skipped. Pending changesets are applied in ascending
    order; the first failure aborts the evolution.

    Args:
        changelog: Changesets (or raw changeset mappings) in any order
        version_key: Document attribute holding the version
            (defaults to settings.version_key)

    Returns:
        Function evolving a document into an EvolutionResult

    Raises:
        pydantic.ValidationError: If the changelog holds invalid changesets

    Example:
        >>> evolve_configuration = evolve(changelog)
        >>> result = evolve_configuration({"defaultFields": ["a"], "version": 0})
        >>> if result.success:
        ...     configuration = result.document
    """
    ordered = sort_changelog(load_changelog(changelog))
    latest = latest_version(ordered)

    duplicates = duplicate_versions(ordered)
    if duplicates and settings.warn_on_duplicate_versions:
        logger.warning(
            "Changelog records versions %s more than once; "
            "their relative order is not defined",
            duplicates,
        )

    def evolve_document(document: Mapping[str, Any]) -> EvolutionResult:
        key = version_key or settings.version_key

        if not isinstance(document, Mapping):
            return EvolutionResult.fail(UnexpectedEvolutionError(
                message=f"Expected a versioned document; got {type(document).__name__}",
            ))

        invalid = invalid_keys(document)
        if invalid:
            return EvolutionResult.fail(UnexpectedEvolutionError(
                message=f"Document attribute names must be strings; got {invalid!r}",
            ))

        base_version = _document_version(document, key)
        if not isinstance(base_version, int) or isinstance(base_version, bool) or base_version < 0:
            return EvolutionResult.fail(UnexpectedEvolutionError(
                message=(
                    f"Document attribute {key!r} must be a non-negative integer; "
                    f"got {base_version!r}"
                ),
            ))

        pending = pending_changesets(ordered, base_version)
        result = reduce(
            _fold_changeset,
            pending,
            EvolutionResult.ok(deepcopy(dict(document)), from_version=base_version),
        )

        if not result.success:
            logger.warning(
                "Evolution from version %s failed after %d changeset(s): %s",
                base_version,
                result.changesets_applied,
                result.error.message,
            )
            return result

        # Always the changelog's latest, even for documents recorded at a newer version
        to_version = latest
        if pending:
            logger.info(
                "Evolved document from version %s to %s (%d changesets)",
                base_version,
                to_version,
                result.changesets_applied,
            )

        return EvolutionResult.ok(
            {**result.document, key: to_version},
            from_version=base_version,
            to_version=to_version,
            changesets_applied=result.changesets_applied,
        )

    return evolve_document
