"""Tests for changeset adapters."""

from types import SimpleNamespace

from evolutions import (
    PatchEvolutionError,
    SpecEditEvolutionError,
    UnexpectedEvolutionError,
    json_patch_changeset,
    spec_edit_changeset,
)
from evolutions.adapters import (
    apply_changeset,
    apply_json_patch_changeset,
    apply_spec_edit_changeset,
)


class TestApplyJsonPatchChangeset:
    """Tests for the JSON Patch adapter."""

    def test_applies_patch(self):
        changeset = json_patch_changeset(version=1, patch=[{"op": "add", "path": "/isEnabled", "value": True}])
        result = apply_json_patch_changeset({"version": 0}, changeset)
        assert result.success
        assert result.document == {"version": 0, "isEnabled": True}

    def test_wraps_patch_error(self):
        changeset = json_patch_changeset(version=4, patch=[{"op": "frobnicate", "path": "/a"}])
        result = apply_json_patch_changeset({}, changeset)
        assert isinstance(result.error, PatchEvolutionError)
        assert result.error.version == 4
        assert result.error.error.index == 0


class TestApplySpecEditChangeset:
    """Tests for the spec edit adapter."""

    def test_applies_spec(self):
        changeset = spec_edit_changeset(version=1, spec={"tags": {"$push": ["b"]}})
        result = apply_spec_edit_changeset({"tags": ["a"]}, changeset)
        assert result.document == {"tags": ["a", "b"]}

    def test_wraps_spec_edit_error(self):
        changeset = spec_edit_changeset(version=3, spec={"tags": {"$merge": {"a": 1}}})
        result = apply_spec_edit_changeset({"tags": ["a"]}, changeset)
        assert isinstance(result.error, SpecEditEvolutionError)
        assert "version 3" in result.error.message


class TestApplyChangeset:
    """Tests for adapter dispatch."""

    def test_dispatches_by_type(self):
        patch = json_patch_changeset(version=1, patch=[{"op": "add", "path": "/a", "value": 1}])
        edit = spec_edit_changeset(version=2, spec={"a": {"$apply": lambda a: a + 1}})

        first = apply_changeset({}, patch)
        second = apply_changeset(first.document, edit)

        assert second.document == {"a": 2}

    def test_unsupported_type(self):
        changeset = SimpleNamespace(type="SQL_CHANGESET", version=1)
        result = apply_changeset({}, changeset)
        assert isinstance(result.error, UnexpectedEvolutionError)
        assert "SQL_CHANGESET" in result.error.message
