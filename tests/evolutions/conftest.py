"""
Configuration schema lineage used across evolution tests.

v0: {"defaultFields": [...]}
v1: adds "isEnabled" (JSON Patch changeset, version 1)
v2: moves "defaultFields" into "fieldConfiguration" (JSON Patch changeset, version 2)
"""

import pytest
from pydantic import BaseModel, ConfigDict

from evolutions import json_patch_changeset, latest_version, versioned

ADD_IS_ENABLED_FIELD = json_patch_changeset(
    version=1,
    patch=[
        {"op": "add", "path": "/isEnabled", "value": True},
    ],
)

MIGRATE_DEFAULT_FIELDS_TO_FIELD_CONFIGURATION = json_patch_changeset(
    version=2,
    patch=[
        {
            "op": "add",
            "path": "/fieldConfiguration",
            "value": {"defaultUserFields": [], "defaultCompanyFields": []},
        },
        {
            "op": "copy",
            "path": "/fieldConfiguration/defaultUserFields",
            "from": "/defaultFields",
        },
        {
            "op": "copy",
            "path": "/fieldConfiguration/defaultCompanyFields",
            "from": "/defaultFields",
        },
        {"op": "remove", "path": "/defaultFields"},
    ],
)

V0_CHANGELOG = []
V1_CHANGELOG = [*V0_CHANGELOG, ADD_IS_ENABLED_FIELD]
V2_CHANGELOG = [*V1_CHANGELOG, MIGRATE_DEFAULT_FIELDS_TO_FIELD_CONFIGURATION]


class FieldConfiguration(BaseModel):
    model_config = ConfigDict(extra="forbid")

    defaultUserFields: list[str]
    defaultCompanyFields: list[str]


class ConfigurationV2(BaseModel):
    """Configuration at the latest schema version."""

    model_config = ConfigDict(extra="forbid")

    fieldConfiguration: FieldConfiguration
    isEnabled: bool


@pytest.fixture
def v1_changelog():
    return list(V1_CHANGELOG)


@pytest.fixture
def v2_changelog():
    return list(V2_CHANGELOG)


@pytest.fixture
def v2_codec():
    return versioned(ConfigurationV2, latest_version(V2_CHANGELOG))


@pytest.fixture
def configuration_v2():
    return ConfigurationV2(
        fieldConfiguration=FieldConfiguration(
            defaultUserFields=["name", "id"],
            defaultCompanyFields=["name"],
        ),
        isEnabled=False,
    )


@pytest.fixture(params=[[], ["a"], ["name", "id"], ["", "ü", "name"]])
def default_fields(request):
    return request.param
