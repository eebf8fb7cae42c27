"""
Changelog ordering and version queries.

A changelog is order-irrelevant at construction time; every query here
works on the changelog sorted ascending by version.
"""

from collections import Counter
from typing import Any, Sequence

from pydantic import TypeAdapter

from .models import Changelog, Changeset

# Version of any document predating the first recorded changeset
BASE_VERSION = 0

_changelog_adapter = TypeAdapter(Changelog)


def load_changelog(raw: Sequence[Any]) -> Changelog:
    """
    Validate raw changeset mappings into typed changesets.

    Each mapping selects its changeset variant through the "type" key.

    Raises:
        pydantic.ValidationError: If a mapping is not a valid changeset
    """
    return _changelog_adapter.validate_python(list(raw))


def sort_changelog(changelog: Sequence[Changeset]) -> Changelog:
    """
    Sort a changelog ascending by version.

    The sort is stable, so changesets sharing a version keep their
    relative input order.
    """
    return sorted(changelog, key=lambda changeset: changeset.version)


def latest_version(changelog: Sequence[Changeset]) -> int:
    """
    Return the latest version recorded in a changelog.

    Args:
        changelog: Changesets in any order

    Returns:
        Version of the last changeset once sorted, or the base version
        if the changelog is empty
    """
    ordered = sort_changelog(changelog)
    if not ordered:
        return BASE_VERSION
    return ordered[-1].version


def pending_changesets(changelog: Sequence[Changeset], version: int) -> Changelog:
    """
    Return the changesets not yet applied to a document at the given version.

    Walks the sorted changelog from its tail while changesets are newer
    than the document, then restores ascending order.

    Args:
        changelog: Changesets in any order
        version: Current version of the document

    Returns:
        Changesets with a version greater than the document's, ascending
    """
    pending: Changelog = []
    for changeset in reversed(sort_changelog(changelog)):
        if changeset.version <= version:
            break
        pending.append(changeset)
    pending.reverse()
    return pending


def duplicate_versions(changelog: Sequence[Changeset]) -> list[int]:
    """
    Return the versions recorded by more than one changeset, ascending.

    Each version must identify a single step of a schema lineage; the
    order in which duplicates are applied is not defined.
    """
    counts = Counter(changeset.version for changeset in changelog)
    return sorted(version for version, count in counts.items() if count > 1)
