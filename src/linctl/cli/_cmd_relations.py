"""Issue relation and hierarchy commands for linctl CLI."""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

import typer

from linctl import queries
from linctl.errors import IssueNotFoundError, LinctlError, RelationNotFoundError
from linctl.models import RelationType, relation_views

from ._formatting import relation_compact, relation_row
from ._helpers import fail, get_state, require_success

if TYPE_CHECKING:
    from linctl.client import LinearClient
    from linctl.models import IssueLinks

_ISSUE_HELP = "Issue identifier (e.g. ENG-123)"


def fetch_links(client: LinearClient, issue_id: str) -> IssueLinks:
    """Fetch an issue's parent, children and relations.

    Raises:
        IssueNotFoundError: If the issue does not exist
    """
    links = client.execute(queries.GET_ISSUE_RELATIONS, {"id": issue_id})
    if links is None:
        raise IssueNotFoundError(issue_id)
    return links


def register(app: typer.Typer, issue_app: typer.Typer) -> None:
    """Register relation commands."""

    @issue_app.command("relations")
    def relations(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help=_ISSUE_HELP),
    ) -> None:
        """Show an issue's parent, children and related issues."""
        state = get_state(ctx)
        try:
            links = fetch_links(state.client, issue_id)
        except LinctlError as e:
            fail(state, e)

        renderer = state.renderer
        views = relation_views(links)
        if not views and not renderer.is_json:
            renderer.render_message(f"No relations for {links.identifier}")
            return
        renderer.render_collection(
            views,
            partial(relation_row, renderer),
            relation_compact,
        )

    @issue_app.command("relate")
    def relate(
        ctx: typer.Context,
        source: str = typer.Argument(..., help="Source issue"),
        relation: RelationType = typer.Argument(..., help="Relation type"),
        target: str = typer.Argument(..., help="Target issue"),
    ) -> None:
        """Create a relation: SOURCE blocks|duplicate|related TARGET."""
        state = get_state(ctx)
        try:
            resolver = state.resolver
            relation_input = {
                "issueId": resolver.issue_id(source),
                "relatedIssueId": resolver.issue_id(target),
                "type": relation.value,
            }
            require_success(
                state.client.execute(
                    queries.CREATE_RELATION,
                    {"input": relation_input},
                ),
                "relation creation",
            )
        except LinctlError as e:
            fail(state, e)

        state.renderer.render_message(f"{source} {relation.value} {target}")

    @issue_app.command("unrelate")
    def unrelate(
        ctx: typer.Context,
        source: str = typer.Argument(..., help="Source issue"),
        target: str = typer.Argument(..., help="Target issue"),
    ) -> None:
        """Remove the relation between two issues, in either direction."""
        state = get_state(ctx)
        try:
            links = fetch_links(state.client, source)
            found = links.find_relation(target)
            if found is None:
                raise RelationNotFoundError(source, target)
            require_success(
                state.client.execute(queries.DELETE_RELATION, {"id": found.id}),
                "relation removal",
            )
        except LinctlError as e:
            fail(state, e)

        state.renderer.render_message(
            f"Removed relation between {source} and {target}",
        )

    @issue_app.command("parent")
    def parent(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help=_ISSUE_HELP),
        parent_id: str = typer.Argument(..., help="Parent issue"),
    ) -> None:
        """Set an issue's parent."""
        state = get_state(ctx)
        try:
            resolved = state.resolver.issue_id(parent_id)
            require_success(
                state.client.execute(
                    queries.UPDATE_ISSUE,
                    {"id": issue_id, "input": {"parentId": resolved}},
                ),
                "parent update",
            )
        except LinctlError as e:
            fail(state, e)

        state.renderer.render_message(f"Set {parent_id} as parent of {issue_id}")

    @issue_app.command("unparent")
    def unparent(
        ctx: typer.Context,
        issue_id: str = typer.Argument(..., help=_ISSUE_HELP),
    ) -> None:
        """Remove an issue's parent."""
        state = get_state(ctx)
        try:
            require_success(
                state.client.execute(
                    queries.UPDATE_ISSUE,
                    {"id": issue_id, "input": {"parentId": None}},
                ),
                "parent removal",
            )
        except LinctlError as e:
            fail(state, e)

        state.renderer.render_message(f"Removed parent from {issue_id}")
