"""Resolution of user-facing names to service-internal identifiers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from linctl import queries
from linctl.cache import TEAMS
from linctl.constants import OPAQUE_ID_MIN_LENGTH
from linctl.errors import (
    IssueNotFoundError,
    LabelNotFoundError,
    NoTeamError,
    ProjectNotFoundError,
    TeamNotFoundError,
    WorkflowStateNotFoundError,
)
from linctl.pagination import fetch_every

if TYPE_CHECKING:
    from collections.abc import Iterable

    from linctl.cache import IdentifierCache
    from linctl.client import LinearClient
    from linctl.models import Label, WorkflowState

logger = logging.getLogger(__name__)


def looks_like_internal_id(ref: str) -> bool:
    """Heuristic for ids that need no lookup: long and hyphen-free."""
    return len(ref) >= OPAQUE_ID_MIN_LENGTH and "-" not in ref


def match_name(items: Iterable[Any], name: str) -> Any | None:
    """Return the first item whose ``name`` equals *name*, ignoring case.

    Duplicate names are not disambiguated: the first match wins.
    """
    folded = name.casefold()
    return next((item for item in items if item.name.casefold() == folded), None)


class Resolver:
    """Turns team keys, status names, labels and issue refs into ids.

    Only team lookups go through the identifier cache; everything else is
    resolved fresh on every call.
    """

    def __init__(self, client: LinearClient, cache: IdentifierCache) -> None:
        self.client = client
        self.cache = cache

    def team_id(self, team_key: str | None) -> str:
        """Resolve a team key, consulting the cache first.

        Raises:
            NoTeamError: If *team_key* is None
            TeamNotFoundError: If no team has that key
        """
        if not team_key:
            raise NoTeamError

        cached = self.cache.get(TEAMS, team_key)
        if cached is not None:
            logger.debug("Team %s resolved from cache", team_key)
            return cached

        teams = self.client.execute(queries.FIND_TEAM, {"key": team_key})
        if not teams:
            raise TeamNotFoundError(team_key)

        team = teams[0]
        self.cache.put(TEAMS, team.key, team.id, name=team.name)
        self.cache.save()
        return team.id

    def workflow_states(self, team_id: str) -> list[WorkflowState]:
        return self.client.execute(queries.LIST_WORKFLOW_STATES, {"teamId": team_id})

    def state_id(self, team_id: str, name: str) -> str:
        """Resolve a status name within a team (case-insensitive, exact).

        Raises:
            WorkflowStateNotFoundError: If no state has that name
        """
        state = match_name(self.workflow_states(team_id), name)
        if state is None:
            raise WorkflowStateNotFoundError(name)
        return state.id

    def completed_state_id(self, team_id: str) -> str:
        """Return the team's first state of type ``completed``.

        Raises:
            WorkflowStateNotFoundError: If the team has no completed state
        """
        for state in self.workflow_states(team_id):
            if state.type == "completed":
                return state.id
        msg = "no completed state for team"
        raise WorkflowStateNotFoundError(msg)

    def labels(self, team_id: str | None = None) -> list[Label]:
        variables: dict[str, Any] = {}
        if team_id:
            variables["filter"] = {"team": {"id": {"eq": team_id}}}
        return fetch_every(self.client, queries.LIST_LABELS, variables)

    def label_id(self, name: str, team_id: str | None = None) -> str:
        """Resolve a single label name.

        Raises:
            LabelNotFoundError: If no label has that name
        """
        return self.label_ids([name], team_id)[0]

    def label_ids(self, names: list[str], team_id: str | None = None) -> list[str]:
        """Resolve several label names at once.

        Either every name resolves or none does.

        Raises:
            LabelNotFoundError: Naming every label that did not resolve
        """
        if not names:
            return []
        available = self.labels(team_id)
        resolved: list[str] = []
        missing: list[str] = []
        for name in names:
            label = match_name(available, name)
            if label is None:
                missing.append(name)
            else:
                resolved.append(label.id)
        if missing:
            raise LabelNotFoundError(", ".join(missing))
        return resolved

    def project_id(self, name: str) -> str:
        """Resolve a project name (case-insensitive, exact).

        Raises:
            ProjectNotFoundError: If no project has that name
        """
        projects = fetch_every(self.client, queries.LIST_PROJECTS)
        project = match_name(projects, name)
        if project is None:
            raise ProjectNotFoundError(name)
        return project.id

    def issue_id(self, ref: str) -> str:
        """Resolve an issue identifier (e.g. ENG-123) to its internal id.

        Raises:
            IssueNotFoundError: If the issue does not exist
        """
        if looks_like_internal_id(ref):
            return ref
        issue_id = self.client.execute(queries.GET_ISSUE_ID, {"id": ref})
        if issue_id is None:
            raise IssueNotFoundError(ref)
        return issue_id

    def viewer_id(self) -> str:
        """Return the authenticated user's id (never cached)."""
        return self.client.execute(queries.VIEWER)

    def assignee_id(self, value: str) -> str:
        """Resolve ``"me"`` to the viewer; pass anything else through."""
        if value.lower() == "me":
            return self.viewer_id()
        return value
