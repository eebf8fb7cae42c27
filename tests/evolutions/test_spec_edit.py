"""Tests for the spec-based document editor."""

import pytest

from evolutions.spec_edit import SpecEditError, edit


@pytest.fixture
def document():
    return {
        "defaultFields": ["name", "id"],
        "isEnabled": False,
        "fieldConfiguration": {"defaultUserFields": ["name"]},
    }


class TestCommands:
    """Tests for individual commands."""

    def test_set_existing(self, document):
        result = edit(document, {"isEnabled": {"$set": True}})
        assert result["isEnabled"] is True

    def test_set_creates_attribute(self, document):
        result = edit(document, {"label": {"$set": "x"}})
        assert result["label"] == "x"

    def test_unset(self, document):
        result = edit(document, {"$unset": ["isEnabled", "notThere"]})
        assert "isEnabled" not in result
        assert "defaultFields" in result

    def test_merge(self, document):
        result = edit(document, {"fieldConfiguration": {"$merge": {"defaultCompanyFields": ["id"]}}})
        assert result["fieldConfiguration"] == {
            "defaultUserFields": ["name"],
            "defaultCompanyFields": ["id"],
        }

    def test_push(self, document):
        result = edit(document, {"defaultFields": {"$push": ["email"]}})
        assert result["defaultFields"] == ["name", "id", "email"]

    def test_unshift_prepends_one_at_a_time(self, document):
        result = edit(document, {"defaultFields": {"$unshift": ["a", "b"]}})
        assert result["defaultFields"] == ["b", "a", "name", "id"]

    def test_splice(self, document):
        result = edit(document, {"defaultFields": {"$splice": [[1, 1, "uid", "email"]]}})
        assert result["defaultFields"] == ["name", "uid", "email"]

    def test_splice_negative_start(self, document):
        result = edit(document, {"defaultFields": {"$splice": [[-1, 1]]}})
        assert result["defaultFields"] == ["name"]

    def test_splice_without_delete_count(self, document):
        result = edit(document, {"defaultFields": {"$splice": [[0]]}})
        assert result["defaultFields"] == []

    def test_apply(self, document):
        result = edit(document, {"defaultFields": {"$apply": lambda fields: [f.upper() for f in fields]}})
        assert result["defaultFields"] == ["NAME", "ID"]

    def test_apply_to_missing_attribute(self, document):
        result = edit(document, {"count": {"$apply": lambda value: (value or 0) + 1}})
        assert result["count"] == 1

    def test_toggle(self, document):
        result = edit(document, {"$toggle": ["isEnabled"]})
        assert result["isEnabled"] is True

    def test_array_index_descent(self, document):
        result = edit(document, {"defaultFields": {"0": {"$set": "fullName"}}})
        assert result["defaultFields"] == ["fullName", "id"]

    def test_multiple_commands(self, document):
        result = edit(document, {"defaultFields": {"$push": ["c"], "$unshift": ["a"]}})
        assert result["defaultFields"] == ["a", "name", "id", "c"]


class TestEditIsPure:
    """The input document is never modified."""

    def test_original_unchanged(self, document):
        edit(document, {
            "defaultFields": {"$push": ["email"]},
            "fieldConfiguration": {"defaultUserFields": {"$push": ["id"]}},
            "isEnabled": {"$apply": lambda value: not value},
        })
        assert document == {
            "defaultFields": ["name", "id"],
            "isEnabled": False,
            "fieldConfiguration": {"defaultUserFields": ["name"]},
        }

    def test_result_does_not_share_untouched_values(self, document):
        result = edit(document, {"isEnabled": {"$set": True}})
        assert result["defaultFields"] == document["defaultFields"]
        assert result["defaultFields"] is not document["defaultFields"]

    def test_set_value_is_copied(self, document):
        value = {"nested": [1]}
        result = edit(document, {"extra": {"$set": value}})
        value["nested"].append(2)
        assert result["extra"] == {"nested": [1]}


class TestSpecEditErrors:
    """Tests for malformed specs."""

    def test_push_onto_missing_attribute(self, document):
        """$push onto a nonexistent array fails."""
        with pytest.raises(SpecEditError) as exc_info:
            edit(document, {"nonExistingArray": {"$push": [1, 2, 3]}})
        assert "$push" in str(exc_info.value)
        assert exc_info.value.path == "/nonExistingArray"

    def test_push_onto_object(self, document):
        with pytest.raises(SpecEditError):
            edit(document, {"fieldConfiguration": {"$push": ["x"]}})

    def test_merge_into_array(self, document):
        with pytest.raises(SpecEditError):
            edit(document, {"defaultFields": {"$merge": {"a": 1}}})

    def test_merge_with_non_object(self, document):
        with pytest.raises(SpecEditError):
            edit(document, {"fieldConfiguration": {"$merge": ["a"]}})

    def test_descend_into_missing_attribute(self, document):
        with pytest.raises(SpecEditError):
            edit(document, {"missing": {"child": {"$set": 1}}})

    def test_descend_into_scalar(self, document):
        with pytest.raises(SpecEditError):
            edit(document, {"isEnabled": {"child": {"$set": 1}}})

    def test_unknown_command(self, document):
        with pytest.raises(SpecEditError):
            edit(document, {"isEnabled": {"$flip": True}})

    def test_commands_mixed_with_keys(self, document):
        with pytest.raises(SpecEditError):
            edit(document, {"fieldConfiguration": {"$merge": {}, "defaultUserFields": {"$set": []}}})

    def test_set_combined_with_commands(self, document):
        with pytest.raises(SpecEditError):
            edit(document, {"defaultFields": {"$set": [], "$push": ["a"]}})

    def test_spec_not_an_object(self, document):
        with pytest.raises(SpecEditError):
            edit(document, {"isEnabled": True})

    def test_array_index_out_of_bounds(self, document):
        with pytest.raises(SpecEditError):
            edit(document, {"defaultFields": {"5": {"$set": "x"}}})

    @pytest.mark.parametrize("index", ["01", "²", "-1", "1.0"])
    def test_malformed_array_index(self, document, index):
        with pytest.raises(SpecEditError):
            edit(document, {"defaultFields": {index: {"$set": "x"}}})

    @pytest.mark.parametrize("command", ["$unset", "$toggle"])
    @pytest.mark.parametrize("target", [{}, {"isEnabled": False}])
    def test_attribute_names_must_be_strings(self, command, target):
        with pytest.raises(SpecEditError):
            edit({"a": target}, {"a": {command: [["x"]]}})

    def test_malformed_splice(self, document):
        with pytest.raises(SpecEditError):
            edit(document, {"defaultFields": {"$splice": [["1", 1]]}})

    def test_apply_requires_callable(self, document):
        with pytest.raises(SpecEditError):
            edit(document, {"isEnabled": {"$apply": "not callable"}})

    def test_apply_errors_propagate(self, document):
        """Errors raised by $apply functions are not spec errors."""
        def explode(value):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            edit(document, {"isEnabled": {"$apply": explode}})
