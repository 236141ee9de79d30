"""Custom field service: projection of workspace fields onto projects, and value writes."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lunapm.exceptions import ConstraintViolationError, DomainValidationError, NotFoundError
from lunapm.models.enums import CustomFieldType
from lunapm.models.project import Project
from lunapm.models.workspace import ProjectCustomFieldValue, WorkspaceCustomField

logger = structlog.get_logger()


@dataclass
class CustomFieldEntry:
    """A defined field paired with a project's value for it."""

    field: Any
    value: str

    @property
    def name(self) -> str:
        return self.field.name


def project_custom_fields(
    definitions: Iterable[Any],
    values: Iterable[Any],
) -> list[CustomFieldEntry]:
    """Merge a workspace's field definitions with one project's sparse values.

    Entries follow definition order (position, then name). Fields without a value are
    omitted, and values whose field is not among ``definitions`` are ignored.
    """
    value_by_field = {value.custom_field_id: value.value for value in values}
    ordered = sorted(definitions, key=lambda field: (field.position, field.name))
    return [
        CustomFieldEntry(field=field, value=value_by_field[field.id])
        for field in ordered
        if field.id in value_by_field
    ]


class CustomFieldService:
    """Service for workspace custom fields and their per-project values."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_workspace_fields(self, workspace_id: UUID) -> Sequence[WorkspaceCustomField]:
        """Field definitions of a workspace in display order."""
        result = await self.db.execute(
            select(WorkspaceCustomField)
            .where(WorkspaceCustomField.workspace_id == workspace_id)
            .order_by(WorkspaceCustomField.position, WorkspaceCustomField.name)
        )
        return result.scalars().all()

    async def get_project_values(
        self, project_ids: Sequence[UUID]
    ) -> dict[UUID, list[ProjectCustomFieldValue]]:
        """Values of several projects keyed by project id."""
        values: dict[UUID, list[ProjectCustomFieldValue]] = {
            project_id: [] for project_id in project_ids
        }
        if not project_ids:
            return values
        result = await self.db.execute(
            select(ProjectCustomFieldValue).where(
                ProjectCustomFieldValue.project_id.in_(project_ids)
            )
        )
        for value in result.scalars().all():
            values[value.project_id].append(value)
        return values

    async def add_value(
        self,
        project_id: UUID,
        custom_field_id: UUID,
        value: str,
    ) -> ProjectCustomFieldValue:
        """Create a project's value for a field.

        A second value for the same (project, field) pair is rejected by the unique
        constraint and never overwrites the first.
        """
        field = await self._get_field_for_project(project_id, custom_field_id)
        self._check_value(field, value)

        field_name = field.name
        field_value = ProjectCustomFieldValue(
            project_id=project_id,
            custom_field_id=custom_field_id,
            value=value,
        )
        self.db.add(field_value)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                "custom_field_value_conflict",
                project_id=str(project_id),
                field_id=str(custom_field_id),
            )
            raise ConstraintViolationError(
                f"Project already has a value for field '{field_name}'"
            ) from e

        logger.info(
            "custom_field_value_set",
            project_id=str(project_id),
            field_id=str(custom_field_id),
        )
        return field_value

    async def update_value(
        self,
        project_id: UUID,
        custom_field_id: UUID,
        value: str,
    ) -> ProjectCustomFieldValue:
        """Replace an existing value. Missing values are not created here."""
        field = await self._get_field_for_project(project_id, custom_field_id)
        self._check_value(field, value)

        result = await self.db.execute(
            select(ProjectCustomFieldValue).where(
                and_(
                    ProjectCustomFieldValue.project_id == project_id,
                    ProjectCustomFieldValue.custom_field_id == custom_field_id,
                )
            )
        )
        existing = result.scalar_one_or_none()
        if existing is None:
            raise NotFoundError("Custom field value", custom_field_id)

        existing.value = value
        await self.db.flush()

        logger.info(
            "custom_field_value_updated",
            project_id=str(project_id),
            field_id=str(custom_field_id),
        )
        return existing

    async def _get_field_for_project(
        self, project_id: UUID, custom_field_id: UUID
    ) -> WorkspaceCustomField:
        project = await self.db.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        field = await self.db.get(WorkspaceCustomField, custom_field_id)
        if field is None:
            raise NotFoundError("Custom field", custom_field_id)
        if field.workspace_id != project.workspace_id:
            raise DomainValidationError(
                "Custom field does not belong to the project's workspace"
            )
        return field

    def _check_value(self, field: WorkspaceCustomField, value: str) -> None:
        valid, error = self.validate_value(field, value)
        if not valid:
            raise DomainValidationError(error or "Invalid value")

    # =========================================================================
    # Validation
    # =========================================================================

    def validate_value(
        self,
        field: WorkspaceCustomField,
        value: str,
    ) -> tuple[bool, str | None]:
        """Validate a value against a field definition."""
        if not value or not value.strip():
            return False, f"Field '{field.name}' needs a value"

        if field.field_type == CustomFieldType.NUMBER.value:
            try:
                float(value)
            except ValueError:
                return False, "Value must be a number"

        elif field.field_type == CustomFieldType.SELECT.value:
            options = field.options or []
            if value not in options:
                return False, f"Value must be one of: {', '.join(options)}"

        elif field.field_type == CustomFieldType.URL.value:
            if not value.startswith(("http://", "https://")):
                return False, "Value must be a valid URL"

        elif field.field_type == CustomFieldType.DATE.value:
            try:
                date.fromisoformat(value)
            except ValueError:
                return False, "Value must be a date (YYYY-MM-DD)"

        return True, None
