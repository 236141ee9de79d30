"""Enumerations stored as plain strings in the database."""

import enum


class WorkspaceType(str, enum.Enum):
    CLIENT = "CLIENT"
    COMPANY = "COMPANY"


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    CLIENT = "CLIENT"


class ProjectStatus(str, enum.Enum):
    INTAKE = "INTAKE"
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    COMPLETE = "COMPLETE"


class TaskPriority(str, enum.Enum):
    URGENT = "URGENT"
    HIGH = "HIGH"
    NORMAL = "NORMAL"
    LOW = "LOW"


class StatusState(str, enum.Enum):
    """Lifecycle of a task status; archived statuses are hidden from boards."""

    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class ApprovalStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class CustomFieldType(str, enum.Enum):
    TEXT = "TEXT"
    NUMBER = "NUMBER"
    DATE = "DATE"
    SELECT = "SELECT"
    URL = "URL"
