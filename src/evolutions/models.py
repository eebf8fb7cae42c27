"""
Pydantic models for changelogs and evolution results.

A changeset records one transformation together with the version a
document reaches once the transformation has been applied.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .json_patch import PatchError

JSON_PATCH_CHANGESET = "JSON_PATCH_CHANGESET"
SPEC_EDIT_CHANGESET = "SPEC_EDIT_CHANGESET"


class JsonPatchChangeset(BaseModel):
    """
    A changeset described as a JSON Patch (RFC 6902).

    Operations are kept as supplied and only checked when applied.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["JSON_PATCH_CHANGESET"] = JSON_PATCH_CHANGESET
    version: int = Field(
        ...,
        ge=0,
        description="Version the document reaches after this changeset"
    )
    patch: Any = Field(
        default_factory=list,
        description="Ordered JSON Patch operations"
    )


class SpecEditChangeset(BaseModel):
    """A changeset described as a declarative edit spec."""

    model_config = ConfigDict(frozen=True)

    type: Literal["SPEC_EDIT_CHANGESET"] = SPEC_EDIT_CHANGESET
    version: int = Field(
        ...,
        ge=0,
        description="Version the document reaches after this changeset"
    )
    spec: Any = Field(
        default_factory=dict,
        description="Nested edit commands mirroring the document shape"
    )


Changeset = Annotated[
    Union[JsonPatchChangeset, SpecEditChangeset],
    Field(discriminator="type"),
]

Changelog = list[Changeset]


def json_patch_changeset(version: int, patch: Any) -> JsonPatchChangeset:
    """
    JSON Patch changeset constructor.

    Example:
        json_patch_changeset(
            version=1,
            patch=[{"op": "add", "path": "/isEnabled", "value": True}],
        )
    """
    return JsonPatchChangeset(version=version, patch=patch)


def spec_edit_changeset(version: int, spec: Any) -> SpecEditChangeset:
    """Spec edit changeset constructor."""
    return SpecEditChangeset(version=version, spec=spec)


# --- Evolution errors ---

class PatchEvolutionError(BaseModel):
    """A JSON Patch changeset could not be applied."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    error_code: Literal["JSON_PATCH_EVOLUTION_ERROR"] = "JSON_PATCH_EVOLUTION_ERROR"
    message: str
    version: Optional[int] = Field(
        default=None,
        description="Version of the failing changeset"
    )
    error: Optional[PatchError] = None


class SpecEditEvolutionError(BaseModel):
    """A spec edit changeset could not be applied."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    error_code: Literal["SPEC_EDIT_EVOLUTION_ERROR"] = "SPEC_EDIT_EVOLUTION_ERROR"
    message: str
    version: Optional[int] = Field(
        default=None,
        description="Version of the failing changeset"
    )
    error: Optional[Exception] = None


class UnexpectedEvolutionError(BaseModel):
    """Any failure that does not come from a known changeset engine."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    error_code: Literal["UNEXPECTED_EVOLUTION_ERROR"] = "UNEXPECTED_EVOLUTION_ERROR"
    message: str
    version: Optional[int] = Field(
        default=None,
        description="Version of the failing changeset (if any)"
    )
    error: Optional[Exception] = None


EvolutionError = Annotated[
    Union[PatchEvolutionError, SpecEditEvolutionError, UnexpectedEvolutionError],
    Field(discriminator="error_code"),
]


class EvolutionFailedError(Exception):
    """Raised by EvolutionResult.unwrap() when the evolution failed."""

    def __init__(self, error: Any):
        super().__init__(error.message)
        self.error = error


class EvolutionResult(BaseModel):
    """
    Result of evolving a document.

    Either holds the fully evolved document or exactly one error
    describing the first changeset that failed.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    success: bool = Field(description="Whether every pending changeset was applied")
    document: Optional[dict[str, Any]] = Field(
        default=None,
        description="The evolved document (if successful)"
    )
    error: Optional[EvolutionError] = Field(
        default=None,
        description="The first failure encountered (if any)"
    )
    from_version: Optional[int] = Field(
        default=None,
        description="Version of the document before evolution"
    )
    to_version: Optional[int] = Field(
        default=None,
        description="Version of the document after evolution (if successful)"
    )
    changesets_applied: int = Field(
        default=0,
        description="Number of changesets applied"
    )

    @classmethod
    def ok(cls, document: dict[str, Any], **kwargs: Any) -> "EvolutionResult":
        return cls(success=True, document=document, **kwargs)

    @classmethod
    def fail(cls, error: Any, **kwargs: Any) -> "EvolutionResult":
        return cls(success=False, error=error, **kwargs)

    def unwrap(self) -> dict[str, Any]:
        """Return the evolved document or raise EvolutionFailedError."""
        if not self.success:
            raise EvolutionFailedError(self.error)
        return self.document
