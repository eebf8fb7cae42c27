"""
Versioned Document Evolutions

Brings persisted, version-tagged documents up to the latest version of
their schema at read time by applying recorded changesets in order.
"""

__version__ = "0.1.0"

from .changelog import (
    BASE_VERSION,
    duplicate_versions,
    latest_version,
    load_changelog,
    pending_changesets,
    sort_changelog,
)
from .codec import VersionedCodec, versioned
from .evolution import evolve
from .models import (
    Changelog,
    Changeset,
    EvolutionError,
    EvolutionFailedError,
    EvolutionResult,
    JsonPatchChangeset,
    PatchEvolutionError,
    SpecEditChangeset,
    SpecEditEvolutionError,
    UnexpectedEvolutionError,
    json_patch_changeset,
    spec_edit_changeset,
)

__all__ = [
    "__version__",
    "BASE_VERSION",
    "Changelog",
    "Changeset",
    "EvolutionError",
    "EvolutionFailedError",
    "EvolutionResult",
    "JsonPatchChangeset",
    "PatchEvolutionError",
    "SpecEditChangeset",
    "SpecEditEvolutionError",
    "UnexpectedEvolutionError",
    "VersionedCodec",
    "duplicate_versions",
    "evolve",
    "json_patch_changeset",
    "latest_version",
    "load_changelog",
    "pending_changesets",
    "sort_changelog",
    "spec_edit_changeset",
    "versioned",
]
