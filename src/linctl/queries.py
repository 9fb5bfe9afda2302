"""GraphQL operations and their typed result decoders.

Each :class:`Operation` pairs a document with the function that turns its
``data`` payload into one result type, so responses are decoded exactly once
at the transport boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from linctl.models import (
    Attachment,
    Comment,
    Cycle,
    Issue,
    IssueLinks,
    Label,
    MutationResult,
    Project,
    Team,
    UploadTarget,
    WorkflowState,
)
from linctl.pagination import Page

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")


@dataclass(frozen=True)
class Operation(Generic[T]):
    """A named GraphQL document with its result decoder."""

    name: str
    document: str
    decode: Callable[[dict[str, Any]], T]


def _mutation_result(key: str, entity: str | None = None) -> Callable[..., Any]:
    def decode(data: dict[str, Any]) -> MutationResult:
        payload = data[key]
        record = (payload.get(entity) if entity else None) or {}
        return MutationResult(
            success=bool(payload.get("success")),
            identifier=record.get("identifier"),
            title=record.get("title"),
        )

    return decode


def _issue_field(key: str, decode: Callable[[Any], T]) -> Callable[..., T | None]:
    """Decode ``data.issue.<key>``, or None when the issue does not exist."""

    def decoder(data: dict[str, Any]) -> T | None:
        issue = data.get("issue")
        if issue is None:
            return None
        return decode(issue[key])

    return decoder


ISSUE_FIELDS_FRAGMENT = """
fragment IssueFields on Issue {
    id
    identifier
    title
    description
    priority
    state { id name color type }
    assignee { id name email }
    team { id key name }
    project { id name state }
    cycle { id name number startsAt endsAt }
    labels { nodes { id name color description } }
    parent { id identifier title }
    createdAt
    updatedAt
}
"""

PAGE_INFO = "pageInfo { hasNextPage endCursor }"


LIST_ISSUES: Operation[Page[Issue]] = Operation(
    name="ListIssues",
    document=f"""
query ListIssues($filter: IssueFilter, $first: Int, $after: String) {{
    issues(filter: $filter, first: $first, after: $after) {{
        nodes {{ ...IssueFields }}
        {PAGE_INFO}
    }}
}}
{ISSUE_FIELDS_FRAGMENT}""",
    decode=lambda data: Page.from_connection(data["issues"], Issue.from_api),
)

GET_ISSUE: Operation[Issue | None] = Operation(
    name="GetIssue",
    document=f"""
query GetIssue($id: String!) {{
    issue(id: $id) {{ ...IssueFields }}
}}
{ISSUE_FIELDS_FRAGMENT}""",
    decode=lambda data: Issue.from_api(data["issue"]) if data.get("issue") else None,
)

GET_ISSUE_ID: Operation[str | None] = Operation(
    name="GetIssueId",
    document="""
query GetIssueId($id: String!) {
    issue(id: $id) { id }
}""",
    decode=lambda data: data["issue"]["id"] if data.get("issue") else None,
)

CREATE_ISSUE: Operation[MutationResult] = Operation(
    name="CreateIssue",
    document="""
mutation CreateIssue($input: IssueCreateInput!) {
    issueCreate(input: $input) {
        success
        issue { id identifier title }
    }
}""",
    decode=_mutation_result("issueCreate", "issue"),
)

UPDATE_ISSUE: Operation[MutationResult] = Operation(
    name="UpdateIssue",
    document="""
mutation UpdateIssue($id: String!, $input: IssueUpdateInput!) {
    issueUpdate(id: $id, input: $input) {
        success
        issue { id identifier title }
    }
}""",
    decode=_mutation_result("issueUpdate", "issue"),
)

VIEWER: Operation[str] = Operation(
    name="Viewer",
    document="""
query Viewer {
    viewer { id }
}""",
    decode=lambda data: data["viewer"]["id"],
)

FIND_TEAM: Operation[list[Team]] = Operation(
    name="FindTeam",
    document="""
query FindTeam($key: String!) {
    teams(filter: { key: { eqIgnoreCase: $key } }) {
        nodes { id key name }
    }
}""",
    decode=lambda data: [Team.from_api(n) for n in data["teams"]["nodes"]],
)

LIST_TEAMS: Operation[Page[Team]] = Operation(
    name="ListTeams",
    document=f"""
query ListTeams($first: Int, $after: String) {{
    teams(first: $first, after: $after) {{
        nodes {{ id key name }}
        {PAGE_INFO}
    }}
}}""",
    decode=lambda data: Page.from_connection(data["teams"], Team.from_api),
)

LIST_WORKFLOW_STATES: Operation[list[WorkflowState]] = Operation(
    name="ListWorkflowStates",
    document="""
query ListWorkflowStates($teamId: ID!) {
    workflowStates(filter: { team: { id: { eq: $teamId } } }, first: 250) {
        nodes { id name color type }
    }
}""",
    decode=lambda data: [
        WorkflowState.from_api(n) for n in data["workflowStates"]["nodes"]
    ],
)

LIST_LABELS: Operation[Page[Label]] = Operation(
    name="ListLabels",
    document=f"""
query ListLabels($filter: IssueLabelFilter, $first: Int, $after: String) {{
    issueLabels(filter: $filter, first: $first, after: $after) {{
        nodes {{ id name color description }}
        {PAGE_INFO}
    }}
}}""",
    decode=lambda data: Page.from_connection(data["issueLabels"], Label.from_api),
)

LIST_PROJECTS: Operation[Page[Project]] = Operation(
    name="ListProjects",
    document=f"""
query ListProjects($filter: ProjectFilter, $first: Int, $after: String) {{
    projects(filter: $filter, first: $first, after: $after) {{
        nodes {{ id name state }}
        {PAGE_INFO}
    }}
}}""",
    decode=lambda data: Page.from_connection(data["projects"], Project.from_api),
)

LIST_CYCLES: Operation[Page[Cycle]] = Operation(
    name="ListCycles",
    document=f"""
query ListCycles($filter: CycleFilter, $first: Int, $after: String) {{
    cycles(filter: $filter, first: $first, after: $after) {{
        nodes {{ id name number startsAt endsAt }}
        {PAGE_INFO}
    }}
}}""",
    decode=lambda data: Page.from_connection(data["cycles"], Cycle.from_api),
)

GET_CYCLE: Operation[Cycle | None] = Operation(
    name="GetCycle",
    document="""
query GetCycle($id: String!) {
    cycle(id: $id) { id name number startsAt endsAt }
}""",
    decode=lambda data: Cycle.from_api(data["cycle"]) if data.get("cycle") else None,
)

LIST_COMMENTS: Operation[list[Comment] | None] = Operation(
    name="ListComments",
    document="""
query ListComments($issueId: String!) {
    issue(id: $issueId) {
        comments {
            nodes {
                id
                body
                createdAt
                user { id name email }
            }
        }
    }
}""",
    decode=_issue_field(
        "comments",
        lambda conn: [Comment.from_api(n) for n in conn["nodes"]],
    ),
)

CREATE_COMMENT: Operation[MutationResult] = Operation(
    name="CreateComment",
    document="""
mutation CreateComment($issueId: String!, $body: String!) {
    commentCreate(input: { issueId: $issueId, body: $body }) {
        success
        comment { id }
    }
}""",
    decode=_mutation_result("commentCreate"),
)

LIST_ATTACHMENTS: Operation[list[Attachment] | None] = Operation(
    name="ListAttachments",
    document="""
query ListAttachments($issueId: String!) {
    issue(id: $issueId) {
        attachments {
            nodes { id title url subtitle createdAt }
        }
    }
}""",
    decode=_issue_field(
        "attachments",
        lambda conn: [Attachment.from_api(n) for n in conn["nodes"]],
    ),
)

ATTACH_URL: Operation[MutationResult] = Operation(
    name="AttachmentLinkURL",
    document="""
mutation AttachmentLinkURL($issueId: String!, $url: String!, $title: String) {
    attachmentLinkURL(issueId: $issueId, url: $url, title: $title) {
        success
        attachment { id title url }
    }
}""",
    decode=_mutation_result("attachmentLinkURL", "attachment"),
)

FILE_UPLOAD: Operation[UploadTarget] = Operation(
    name="FileUpload",
    document="""
mutation FileUpload($filename: String!, $contentType: String!, $size: Int!) {
    fileUpload(filename: $filename, contentType: $contentType, size: $size) {
        success
        uploadFile {
            uploadUrl
            assetUrl
            headers { key value }
        }
    }
}""",
    decode=lambda data: UploadTarget.from_api(data["fileUpload"]["uploadFile"]),
)

CREATE_ATTACHMENT: Operation[MutationResult] = Operation(
    name="AttachmentCreate",
    document="""
mutation AttachmentCreate($issueId: String!, $url: String!, $title: String!) {
    attachmentCreate(input: { issueId: $issueId, url: $url, title: $title }) {
        success
        attachment { id title url }
    }
}""",
    decode=_mutation_result("attachmentCreate", "attachment"),
)

GET_ISSUE_RELATIONS: Operation[IssueLinks | None] = Operation(
    name="GetIssueRelations",
    document="""
query GetIssueRelations($id: String!) {
    issue(id: $id) {
        id
        identifier
        relations {
            nodes {
                id
                type
                issue { id identifier title }
                relatedIssue { id identifier title }
            }
        }
        inverseRelations {
            nodes {
                id
                type
                issue { id identifier title }
                relatedIssue { id identifier title }
            }
        }
        parent { id identifier title }
        children { nodes { id identifier title } }
    }
}""",
    decode=lambda data: _decode_links(data.get("issue")),
)

CREATE_RELATION: Operation[MutationResult] = Operation(
    name="CreateIssueRelation",
    document="""
mutation CreateIssueRelation($input: IssueRelationCreateInput!) {
    issueRelationCreate(input: $input) {
        success
        issueRelation { id type }
    }
}""",
    decode=_mutation_result("issueRelationCreate"),
)

DELETE_RELATION: Operation[MutationResult] = Operation(
    name="DeleteIssueRelation",
    document="""
mutation DeleteIssueRelation($id: String!) {
    issueRelationDelete(id: $id) {
        success
    }
}""",
    decode=_mutation_result("issueRelationDelete"),
)


def _decode_links(issue: dict[str, Any] | None) -> IssueLinks | None:
    """Merge outgoing and incoming relation edges into one IssueLinks."""
    if issue is None:
        return None
    links = IssueLinks.from_api(issue)
    inverse = IssueLinks.from_api(
        {
            "id": issue["id"],
            "identifier": issue["identifier"],
            "relations": issue.get("inverseRelations"),
        },
    )
    known = {relation.id for relation in links.relations}
    links.relations.extend(r for r in inverse.relations if r.id not in known)
    return links
