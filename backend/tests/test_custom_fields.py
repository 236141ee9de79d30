# tests/test_custom_fields.py
from types import SimpleNamespace
from uuid import uuid4

import pytest

from lunapm.exceptions import DomainValidationError, NotFoundError
from lunapm.services.custom_field import CustomFieldService, project_custom_fields


def field(name, position, field_type="TEXT", options=()):
    return SimpleNamespace(
        id=uuid4(), name=name, position=position, field_type=field_type, options=list(options)
    )


def value(for_field, text):
    return SimpleNamespace(custom_field_id=for_field.id, value=text)


def test_projection_omits_fields_without_values():
    contractor = field("Contractor", 1)
    style = field("Style Preference", 2)
    budget = field("Budget", 3)

    entries = project_custom_fields(
        [budget, style, contractor], [value(style, "Modern"), value(contractor, "Atlas")]
    )

    assert [(entry.name, entry.value) for entry in entries] == [
        ("Contractor", "Atlas"),
        ("Style Preference", "Modern"),
    ]


def test_projection_ignores_values_of_unknown_fields():
    known = field("Known", 1)
    stray = field("Stray", 2)

    entries = project_custom_fields([known], [value(stray, "x")])

    assert entries == []


@pytest.mark.parametrize(
    "field_type,options,text,valid",
    [
        ("TEXT", (), "anything", True),
        ("TEXT", (), "   ", False),
        ("NUMBER", (), "12.5", True),
        ("NUMBER", (), "twelve", False),
        ("SELECT", ("Modern", "Traditional"), "Modern", True),
        ("SELECT", ("Modern", "Traditional"), "Baroque", False),
        ("URL", (), "https://example.com", True),
        ("URL", (), "example.com", False),
        ("DATE", (), "2026-03-01", True),
        ("DATE", (), "March 1st", False),
    ],
)
def test_validate_value(field_type, options, text, valid):
    definition = field("Field", 1, field_type=field_type, options=options)

    ok, error = CustomFieldService(None).validate_value(definition, text)

    assert ok is valid
    assert (error is None) is valid


async def test_add_and_update_value(factory):
    workspace = await factory.workspace()
    project = await factory.project(workspace)
    style = await factory.custom_field(
        workspace, "Style", field_type="SELECT", options=["Modern", "Traditional"]
    )
    await factory.commit()
    service = CustomFieldService(factory.session)

    created = await service.add_value(project.id, style.id, "Modern")
    updated = await service.update_value(project.id, style.id, "Traditional")

    assert created.id == updated.id
    values = await service.get_project_values([project.id])
    assert [v.value for v in values[project.id]] == ["Traditional"]


async def test_update_missing_value_is_not_found(factory):
    workspace = await factory.workspace()
    project = await factory.project(workspace)
    contractor = await factory.custom_field(workspace, "Contractor")
    await factory.commit()

    with pytest.raises(NotFoundError):
        await CustomFieldService(factory.session).update_value(project.id, contractor.id, "Atlas")


async def test_field_from_another_workspace_is_rejected(factory):
    workspace = await factory.workspace()
    other = await factory.workspace()
    project = await factory.project(workspace)
    foreign = await factory.custom_field(other, "Foreign")
    await factory.commit()

    with pytest.raises(DomainValidationError):
        await CustomFieldService(factory.session).add_value(project.id, foreign.id, "x")


async def test_duplicate_value_fails_over_http(client, factory, admin_headers):
    """A second value for the same project and field is a conflict, not an overwrite"""
    workspace = await factory.workspace()
    project = await factory.project(workspace)
    contractor = await factory.custom_field(workspace, "Contractor")
    await factory.commit()
    url = f"/api/v1/projects/{project.id}/custom-fields"
    payload = {"custom_field_id": str(contractor.id), "value": "Atlas Build Co"}

    first = await client.post(url, json=payload, headers=admin_headers)
    second = await client.post(
        url, json={**payload, "value": "Other Builder"}, headers=admin_headers
    )

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["code"] == "CONSTRAINT_VIOLATION"

    detail = await client.get(f"/api/v1/projects/{project.id}", headers=admin_headers)
    assert detail.json()["custom_fields"] == [
        {"field_id": str(contractor.id), "name": "Contractor", "value": "Atlas Build Co"}
    ]


async def test_invalid_select_value_over_http(client, factory, admin_headers):
    workspace = await factory.workspace()
    project = await factory.project(workspace)
    style = await factory.custom_field(workspace, "Style", field_type="SELECT", options=["Modern"])
    await factory.commit()

    response = await client.post(
        f"/api/v1/projects/{project.id}/custom-fields",
        json={"custom_field_id": str(style.id), "value": "Baroque"},
        headers=admin_headers,
    )

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"
