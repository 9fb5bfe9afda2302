"""Table rows and display functions for linctl CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from linctl.constants import TITLE_WIDTH
from linctl.output import (
    column,
    format_date,
    format_date_only,
    format_relative,
    priority_style,
    status_style,
    truncate,
)

if TYPE_CHECKING:
    from linctl.models import (
        Attachment,
        Comment,
        Cycle,
        Issue,
        Label,
        Project,
        RelationView,
        Team,
    )
    from linctl.output import Renderer


@dataclass
class IssueRow:
    identifier: str = column("ID", no_wrap=True)
    title: str = column("Title")
    status: str = column("Status")
    priority: str = column("Priority")
    assignee: str = column("Assignee")


@dataclass
class TeamRow:
    key: str = column("Key", no_wrap=True)
    name: str = column("Name")
    id: str = column("ID", no_wrap=True)


@dataclass
class ProjectRow:
    name: str = column("Name")
    state: str = column("State")
    id: str = column("ID", no_wrap=True)


@dataclass
class CycleRow:
    number: str = column("Number", no_wrap=True)
    name: str = column("Name")
    starts: str = column("Starts", no_wrap=True)
    ends: str = column("Ends", no_wrap=True)


@dataclass
class LabelRow:
    name: str = column("Name")
    description: str = column("Description")
    id: str = column("ID", no_wrap=True)


@dataclass
class CommentRow:
    author: str = column("Author")
    body: str = column("Comment")
    when: str = column("When", no_wrap=True)


@dataclass
class AttachmentRow:
    number: str = column("#", no_wrap=True)
    title: str = column("Title")
    url: str = column("URL")
    created: str = column("Created", no_wrap=True)


@dataclass
class RelationRow:
    relation: str = column("Relation")
    issue: str = column("Issue", no_wrap=True)
    title: str = column("Title")


def issue_row(renderer: Renderer, issue: Issue) -> IssueRow:
    status = issue.state.name if issue.state else "-"
    return IssueRow(
        identifier=renderer.style(issue.identifier, "bold"),
        title=renderer.style(truncate(issue.title, TITLE_WIDTH), None),
        status=renderer.style(
            status,
            status_style(status, issue.state.color) if issue.state else None,
        ),
        priority=renderer.style(issue.priority.label, priority_style(issue.priority)),
        assignee=renderer.style(
            issue.assignee.name if issue.assignee else "Unassigned",
            None if issue.assignee else "bright_black",
        ),
    )


def issue_compact(issue: Issue) -> str:
    status = issue.state.name if issue.state else "-"
    return f"{issue.identifier} | {issue.title} | {status}"


def format_issue_detail(renderer: Renderer, issue: Issue) -> str:
    """Format an issue for ``issue view``.

    Args:
        renderer: Decides whether styling is applied
        issue: The issue to display

    Returns:
        Multi-line text, header first and description last
    """
    lines = [
        renderer.styled_line(f"{issue.identifier}: {issue.title}", "bold"),
        "",
        f"Team: {issue.team.name} ({issue.team.key})",
    ]
    if issue.state:
        lines.append(
            "Status: "
            + renderer.styled_line(
                issue.state.name,
                status_style(issue.state.name, issue.state.color),
            ),
        )
    lines.append(
        "Priority: "
        + renderer.styled_line(issue.priority.label, priority_style(issue.priority)),
    )
    lines.append(
        f"Assignee: {issue.assignee.name if issue.assignee else 'Unassigned'}",
    )
    if issue.project:
        lines.append(f"Project: {issue.project.name}")
    if issue.cycle:
        lines.append(f"Cycle: {issue.cycle.display_name}")
    if issue.labels:
        lines.append(f"Labels: {', '.join(label.name for label in issue.labels)}")
    if issue.parent:
        lines.append(f"Parent: {issue.parent.identifier} - {issue.parent.title}")
    lines.append(f"Created: {format_date(issue.created_at)}")
    lines.append(f"Updated: {format_date(issue.updated_at)}")
    if issue.description:
        lines.extend(["", issue.description])
    return "\n".join(lines)


def team_row(renderer: Renderer, team: Team) -> TeamRow:
    return TeamRow(
        key=renderer.style(team.key, "bold"),
        name=renderer.style(team.name, None),
        id=renderer.style(team.id, "bright_black"),
    )


def team_compact(team: Team) -> str:
    return f"{team.key} | {team.name}"


def project_row(renderer: Renderer, project: Project) -> ProjectRow:
    return ProjectRow(
        name=renderer.style(project.name, "bold"),
        state=renderer.style(project.state or "-", None),
        id=renderer.style(project.id, "bright_black"),
    )


def project_compact(project: Project) -> str:
    return f"{project.name} | {project.state or '-'}"


def cycle_row(renderer: Renderer, cycle: Cycle) -> CycleRow:
    return CycleRow(
        number=str(cycle.number),
        name=renderer.style(cycle.display_name, None),
        starts=format_date_only(cycle.starts_at),
        ends=format_date_only(cycle.ends_at),
    )


def cycle_compact(cycle: Cycle) -> str:
    return (
        f"{cycle.number} | {cycle.display_name} | "
        f"{format_date_only(cycle.starts_at)} - {format_date_only(cycle.ends_at)}"
    )


def format_cycle_detail(renderer: Renderer, cycle: Cycle) -> str:
    return "\n".join(
        [
            renderer.styled_line(cycle.display_name, "bold"),
            "",
            f"Number: {cycle.number}",
            f"Starts: {format_date_only(cycle.starts_at)}",
            f"Ends: {format_date_only(cycle.ends_at)}",
            f"ID: {cycle.id}",
        ],
    )


def label_row(renderer: Renderer, label: Label) -> LabelRow:
    color = f"#{label.color.lstrip('#')}" if label.color else None
    return LabelRow(
        name=renderer.style(label.name, color),
        description=renderer.style(label.description or "", None),
        id=renderer.style(label.id, "bright_black"),
    )


def label_compact(label: Label) -> str:
    return label.name


def comment_row(renderer: Renderer, comment: Comment) -> CommentRow:
    body = " ".join(comment.body.split())
    return CommentRow(
        author=renderer.style(comment.user.name if comment.user else "Unknown", "bold"),
        body=renderer.style(truncate(body, 80), None),
        when=format_relative(comment.created_at),
    )


def comment_compact(comment: Comment) -> str:
    author = comment.user.name if comment.user else "Unknown"
    return f"{author} | {format_relative(comment.created_at)} | {comment.body}"


def attachment_row(
    renderer: Renderer,
    number: int,
    attachment: Attachment,
) -> AttachmentRow:
    return AttachmentRow(
        number=str(number),
        title=renderer.style(attachment.title or "-", "bold"),
        url=renderer.style(attachment.url or "-", None),
        created=format_date_only(attachment.created_at),
    )


def attachment_compact(number: int, attachment: Attachment) -> str:
    return f"{number} | {attachment.title} | {attachment.url or '-'}"


def relation_row(renderer: Renderer, view: RelationView) -> RelationRow:
    return RelationRow(
        relation=renderer.style(view.relation, "cyan"),
        issue=renderer.style(view.issue, "bold"),
        title=renderer.style(truncate(view.title, TITLE_WIDTH), None),
    )


def relation_compact(view: RelationView) -> str:
    return f"{view.relation} | {view.issue} | {view.title}"
