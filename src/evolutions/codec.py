"""
Versioned codec combinator.

Wraps a strict pydantic model so that encoded values carry the version
they were written at, and decoding a version-tagged value strips the tag
before the model validates the remaining shape.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, create_model, field_validator

from .config import settings

ModelT = TypeVar("ModelT", bound=BaseModel)


def _version_tag_model(name: str, version: int, version_key: str) -> type[BaseModel]:
    """Build a model accepting any object whose version tag equals the given version."""

    def check_version(cls, v: int) -> int:
        if v != version:
            raise ValueError(f"expected version {version}, got {v}")
        return v

    return create_model(
        f"{name}VersionTag",
        __config__=ConfigDict(extra="allow"),
        __validators__={"check_version": field_validator("version")(check_version)},
        version=(int, Field(..., ge=0, strict=True, alias=version_key)),
    )


class VersionedCodec(Generic[ModelT]):
    """
    Codec for a model persisted with a version tag.

    The wrapped model must be strict (extra="forbid") and must not declare
    the version attribute itself, so a tag that is not stripped fails
    validation instead of leaking into the model.
    """

    def __init__(
        self,
        model: type[ModelT],
        version: int,
        version_key: Optional[str] = None,
    ):
        key = version_key or settings.version_key

        if model.model_config.get("extra") != "forbid":
            raise TypeError(
                f"{model.__name__} must forbid extra attributes "
                "(model_config = ConfigDict(extra='forbid'))"
            )
        if any(
            key in (field_name, field.alias)
            for field_name, field in model.model_fields.items()
        ):
            raise TypeError(f"{model.__name__} must not declare the version attribute {key!r}")
        if version < 0:
            raise ValueError("version must be a non-negative integer")

        self.model = model
        self.version = version
        self.version_key = key
        self._tag = _version_tag_model(model.__name__, version, key)

    @property
    def name(self) -> str:
        return f"Versioned<{self.model.__name__}>"

    def is_(self, value: Any) -> bool:
        """Whether the value is an instance of the wrapped model."""
        return isinstance(value, self.model)

    def encode(self, value: ModelT) -> dict[str, Any]:
        """Encode a value and tag it with the codec's version."""
        return {
            **value.model_dump(mode="json", by_alias=True),
            self.version_key: self.version,
        }

    def decode(self, data: Any) -> ModelT:
        """
        Decode a version-tagged value.

        Raises:
            pydantic.ValidationError: If the tag is missing or differs from
                the codec's version, or the untagged shape is invalid
        """
        self._tag.model_validate(data)
        payload = {
            key: value
            for key, value in data.items()
            if key != self.version_key
        }
        return self.model.model_validate(payload)

    def __repr__(self) -> str:
        return f"{self.name}(version={self.version})"


def versioned(
    model: type[ModelT],
    version: int,
    version_key: Optional[str] = None,
) -> VersionedCodec[ModelT]:
    """
    Wrap a strict model in a codec that tags encoded values with a version.

    Example:
        >>> class Configuration(BaseModel):
        ...     model_config = ConfigDict(extra="forbid")
        ...     default_fields: list[str]
        >>> codec = versioned(Configuration, 0)
        >>> codec.encode(Configuration(default_fields=["a"]))
        {'default_fields': ['a'], 'version': 0}
    """
    return VersionedCodec(model, version, version_key)
