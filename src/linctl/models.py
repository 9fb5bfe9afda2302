"""Data models for Linear records using dataclasses.

Each record converts from the API's camelCase payload with ``from_api`` and
back with ``to_dict``. ``from_api(record.to_dict())`` always reproduces an
equal record, which is what the JSON output mode relies on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from linctl.constants import PRIORITY_LABELS


class Priority(IntEnum):
    """Issue priority levels."""

    NONE = 0
    URGENT = 1
    HIGH = 2
    MEDIUM = 3
    LOW = 4

    @classmethod
    def from_api(cls, value: Any) -> Priority:
        """Map an API value to a priority; unknown values become NONE."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.NONE

    @property
    def label(self) -> str:
        return PRIORITY_LABELS[self.value]


def parse_priority(value: str) -> Priority:
    """Parse a priority given as a number (0-4) or a name.

    Accepted names: none, urgent, high, medium, low (case-insensitive).

    Raises:
        ValueError: If the value is not a valid priority.
    """
    raw = value.strip().lower()
    for priority in Priority:
        if raw == priority.label.lower():
            return priority
    try:
        return Priority(int(raw))
    except ValueError:
        names = ", ".join(p.label.lower() for p in Priority)
        msg = f"Invalid priority '{value}'. Use 0-4 or a name ({names})."
        raise ValueError(msg) from None


class RelationType(str, Enum):
    """Relation types between issues."""

    BLOCKS = "blocks"
    DUPLICATE = "duplicate"
    RELATED = "related"

    @property
    def inverse_label(self) -> str:
        """Label for the relation as seen from the target issue."""
        return _INVERSE_LABELS[self]


_INVERSE_LABELS = {
    RelationType.BLOCKS: "blocked by",
    RelationType.DUPLICATE: "duplicate of",
    RelationType.RELATED: "related to",
}


def _optional(data: dict[str, Any], key: str, model: Any) -> Any:
    value = data.get(key)
    return model.from_api(value) if value else None


def _nodes(data: dict[str, Any], key: str, model: Any) -> list[Any]:
    connection = data.get(key) or {}
    return [model.from_api(node) for node in connection.get("nodes", [])]


@dataclass
class Team:
    """A team; issues always belong to exactly one."""

    id: str
    key: str
    name: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Team:
        return cls(id=data["id"], key=data["key"], name=data.get("name", ""))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "key": self.key, "name": self.name}


@dataclass
class User:
    """A workspace member."""

    id: str
    name: str
    email: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> User:
        return cls(id=data["id"], name=data.get("name", ""), email=data.get("email"))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email}


@dataclass
class WorkflowState:
    """A named status scoped to a team, tagged with a state type."""

    id: str
    name: str
    color: str | None = None
    type: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> WorkflowState:
        return cls(
            id=data["id"],
            name=data["name"],
            color=data.get("color"),
            type=data.get("type"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "type": self.type,
        }


@dataclass
class Project:
    id: str
    name: str
    state: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Project:
        return cls(id=data["id"], name=data["name"], state=data.get("state"))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "state": self.state}


@dataclass
class Cycle:
    """A time-boxed iteration (sprint)."""

    id: str
    number: int
    starts_at: str
    ends_at: str
    name: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Cycle:
        return cls(
            id=data["id"],
            number=data["number"],
            starts_at=data["startsAt"],
            ends_at=data["endsAt"],
            name=data.get("name"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "number": self.number,
            "startsAt": self.starts_at,
            "endsAt": self.ends_at,
        }

    @property
    def display_name(self) -> str:
        return self.name or f"Cycle {self.number}"


@dataclass
class Label:
    id: str
    name: str
    color: str | None = None
    description: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Label:
        return cls(
            id=data["id"],
            name=data["name"],
            color=data.get("color"),
            description=data.get("description"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "description": self.description,
        }


@dataclass
class Comment:
    """A comment on an issue."""

    id: str
    body: str
    created_at: str
    user: User | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Comment:
        return cls(
            id=data["id"],
            body=data.get("body", ""),
            created_at=data["createdAt"],
            user=_optional(data, "user", User),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "body": self.body,
            "createdAt": self.created_at,
            "user": self.user.to_dict() if self.user else None,
        }


@dataclass
class Attachment:
    """A link or uploaded file attached to an issue."""

    id: str
    title: str
    created_at: str
    url: str | None = None
    subtitle: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Attachment:
        return cls(
            id=data["id"],
            title=data.get("title") or "",
            created_at=data["createdAt"],
            url=data.get("url"),
            subtitle=data.get("subtitle"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "subtitle": self.subtitle,
            "createdAt": self.created_at,
        }


@dataclass
class RelatedIssueRef:
    """Minimal issue reference used by relations, parents and children."""

    id: str
    identifier: str
    title: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RelatedIssueRef:
        return cls(id=data["id"], identifier=data["identifier"], title=data["title"])

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "identifier": self.identifier, "title": self.title}


@dataclass
class IssueRelation:
    """A directed edge: ``issue`` <type> ``related_issue``."""

    id: str
    type: RelationType
    issue: RelatedIssueRef
    related_issue: RelatedIssueRef

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> IssueRelation:
        return cls(
            id=data["id"],
            type=RelationType(data["type"]),
            issue=RelatedIssueRef.from_api(data["issue"]),
            related_issue=RelatedIssueRef.from_api(data["relatedIssue"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "issue": self.issue.to_dict(),
            "relatedIssue": self.related_issue.to_dict(),
        }


@dataclass
class Issue:
    """An issue in the tracking service."""

    id: str
    identifier: str  # Human-facing, e.g. "ENG-123"
    title: str
    team: Team
    created_at: str
    updated_at: str
    priority: Priority = Priority.NONE
    description: str | None = None
    state: WorkflowState | None = None
    assignee: User | None = None
    project: Project | None = None
    cycle: Cycle | None = None
    labels: list[Label] = field(default_factory=list[Label])
    parent: RelatedIssueRef | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Issue:
        return cls(
            id=data["id"],
            identifier=data["identifier"],
            title=data["title"],
            team=Team.from_api(data["team"]),
            created_at=data["createdAt"],
            updated_at=data["updatedAt"],
            priority=Priority.from_api(data.get("priority")),
            description=data.get("description"),
            state=_optional(data, "state", WorkflowState),
            assignee=_optional(data, "assignee", User),
            project=_optional(data, "project", Project),
            cycle=_optional(data, "cycle", Cycle),
            labels=_nodes(data, "labels", Label),
            parent=_optional(data, "parent", RelatedIssueRef),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "identifier": self.identifier,
            "title": self.title,
            "description": self.description,
            "priority": int(self.priority),
            "state": self.state.to_dict() if self.state else None,
            "assignee": self.assignee.to_dict() if self.assignee else None,
            "team": self.team.to_dict(),
            "project": self.project.to_dict() if self.project else None,
            "cycle": self.cycle.to_dict() if self.cycle else None,
            "labels": {"nodes": [label.to_dict() for label in self.labels]},
            "parent": self.parent.to_dict() if self.parent else None,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class IssueLinks:
    """An issue's hierarchy and relation edges, as fetched for display."""

    id: str
    identifier: str
    relations: list[IssueRelation] = field(default_factory=list[IssueRelation])
    parent: RelatedIssueRef | None = None
    children: list[RelatedIssueRef] = field(default_factory=list[RelatedIssueRef])

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> IssueLinks:
        return cls(
            id=data["id"],
            identifier=data["identifier"],
            relations=_nodes(data, "relations", IssueRelation),
            parent=_optional(data, "parent", RelatedIssueRef),
            children=_nodes(data, "children", RelatedIssueRef),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "identifier": self.identifier,
            "relations": {"nodes": [r.to_dict() for r in self.relations]},
            "parent": self.parent.to_dict() if self.parent else None,
            "children": {"nodes": [c.to_dict() for c in self.children]},
        }

    def find_relation(self, other: str) -> IssueRelation | None:
        """Return the first relation touching *other* (identifier or id)."""
        for relation in self.relations:
            for ref in (relation.related_issue, relation.issue):
                if ref.identifier == self.identifier:
                    continue
                if other in (ref.identifier, ref.id):
                    return relation
        return None


@dataclass
class RelationView:
    """One displayed relation, normalized to the queried issue's side."""

    relation: str
    issue: str
    title: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RelationView:
        return cls(relation=data["relation"], issue=data["issue"], title=data["title"])

    def to_dict(self) -> dict[str, Any]:
        return {"relation": self.relation, "issue": self.issue, "title": self.title}


def relation_views(links: IssueLinks) -> list[RelationView]:
    """Flatten parent, children and relations into display rows.

    Edges where the queried issue is the target use the inverse label and
    point at the source issue.
    """
    views: list[RelationView] = []
    if links.parent:
        views.append(
            RelationView("parent", links.parent.identifier, links.parent.title),
        )
    views.extend(
        RelationView("child", child.identifier, child.title) for child in links.children
    )
    for relation in links.relations:
        if relation.issue.identifier == links.identifier:
            label, other = relation.type.value, relation.related_issue
        else:
            label, other = relation.type.inverse_label, relation.issue
        views.append(RelationView(label, other.identifier, other.title))
    return views


@dataclass
class UploadHeader:
    key: str
    value: str


@dataclass
class UploadTarget:
    """Signed upload destination returned by the fileUpload mutation."""

    upload_url: str
    asset_url: str
    headers: list[UploadHeader] = field(default_factory=list[UploadHeader])

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> UploadTarget:
        return cls(
            upload_url=data["uploadUrl"],
            asset_url=data["assetUrl"],
            headers=[
                UploadHeader(key=h["key"], value=h["value"])
                for h in data.get("headers", [])
            ],
        )


@dataclass
class MutationResult:
    """Outcome of a create/update/delete mutation."""

    success: bool
    identifier: str | None = None
    title: str | None = None
