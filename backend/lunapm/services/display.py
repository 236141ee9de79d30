"""Display helpers shared by the admin and client views.

Badge styling is looked up from the enum value in one place so every view renders the
same label and tone.
"""

import re
from dataclasses import dataclass

from lunapm.models.enums import ApprovalStatus, ProjectStatus, TaskPriority, WorkspaceType


@dataclass(frozen=True)
class Badge:
    label: str
    tone: str


DEFAULT_TONE = "zinc"

PROJECT_STATUS_TONES = {
    ProjectStatus.ACTIVE.value: "emerald",
    ProjectStatus.PENDING.value: "amber",
    ProjectStatus.INTAKE.value: "blue",
}

APPROVAL_STATUS_TONES = {
    ApprovalStatus.APPROVED.value: "emerald",
    ApprovalStatus.REJECTED.value: "red",
    ApprovalStatus.PENDING.value: "amber",
}

PRIORITY_TONES = {
    TaskPriority.URGENT.value: "red",
    TaskPriority.HIGH.value: "orange",
    TaskPriority.LOW.value: "gray",
}

WORKSPACE_TYPE_TONES = {
    WorkspaceType.CLIENT.value: "blue",
    WorkspaceType.COMPANY.value: "purple",
}


def format_label(value: str) -> str:
    """``ON_HOLD`` -> ``On Hold``."""
    return " ".join(part.capitalize() for part in value.lower().split("_"))


def _badge(value: str, tones: dict[str, str]) -> Badge:
    return Badge(label=format_label(value), tone=tones.get(value, DEFAULT_TONE))


def project_status_badge(status: str) -> Badge:
    return _badge(status, PROJECT_STATUS_TONES)


def approval_status_badge(status: str) -> Badge:
    return _badge(status, APPROVAL_STATUS_TONES)


def priority_badge(priority: str) -> Badge:
    return _badge(priority, PRIORITY_TONES)


def workspace_type_badge(workspace_type: str) -> Badge:
    return _badge(workspace_type, WORKSPACE_TYPE_TONES)


def format_bytes(size: int) -> str:
    """Human readable size with one decimal: ``1536`` -> ``1.5 KB``."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def slugify(text: str) -> str:
    """Lowercase URL-safe slug: ``Crescent Interiors!`` -> ``crescent-interiors``."""
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
