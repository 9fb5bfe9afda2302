"""Error taxonomy for linctl.

Every failure the client can report derives from :class:`LinctlError` and
carries an :class:`ErrorCategory`. Commands catch ``LinctlError`` at their
boundary, print a single line and exit non-zero.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorCategory(str, Enum):
    """Reportable failure categories."""

    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    GRAPHQL = "graphql"
    EMPTY_RESPONSE = "empty_response"
    CONFIGURATION = "configuration"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    TRANSFER = "transfer"


class LinctlError(Exception):
    """Base class for all linctl errors."""

    category: ErrorCategory = ErrorCategory.TRANSPORT


class TransportError(LinctlError):
    """The request could not be sent or its response could not be read."""

    category = ErrorCategory.TRANSPORT


class ResponseShapeError(TransportError):
    """The response data did not have the shape the operation expects."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        super().__init__(f"Unexpected response for {operation}: {detail}")


class ApiStatusError(LinctlError):
    """The endpoint answered with a non-success HTTP status."""

    category = ErrorCategory.HTTP_STATUS

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"API error (status {status}): {body}")


class GraphQLError(LinctlError):
    """The response envelope carried application-level errors."""

    category = ErrorCategory.GRAPHQL

    def __init__(self, messages: list[str]) -> None:
        self.messages = messages
        super().__init__(f"GraphQL errors: {', '.join(messages)}")


class EmptyResponseError(LinctlError):
    """A successful status with no data payload."""

    category = ErrorCategory.EMPTY_RESPONSE

    def __init__(self) -> None:
        super().__init__("Empty response from API")


class ConfigError(LinctlError):
    """The configuration file exists but could not be used."""

    category = ErrorCategory.CONFIGURATION

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to load config file at {path}: {reason}")


class MissingApiKeyError(LinctlError):
    """No credential in the environment or the config file."""

    category = ErrorCategory.CONFIGURATION

    def __init__(self, env_var: str, config_path: Path) -> None:
        super().__init__(
            f"No API key found. Set {env_var} or add api_key to {config_path}",
        )


class NoTeamError(LinctlError):
    """A team is required but none was given or configured."""

    category = ErrorCategory.CONFIGURATION

    def __init__(self) -> None:
        super().__init__("Team not specified and no default_team in config")


class NotFoundError(LinctlError):
    """A named resource does not exist."""

    category = ErrorCategory.NOT_FOUND
    kind = "Resource"

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"{self.kind} not found: {key}")


class IssueNotFoundError(NotFoundError):
    kind = "Issue"


class TeamNotFoundError(NotFoundError):
    kind = "Team"


class CycleNotFoundError(NotFoundError):
    kind = "Cycle"


class WorkflowStateNotFoundError(NotFoundError):
    kind = "Workflow state"


class LabelNotFoundError(NotFoundError):
    kind = "Label"


class ProjectNotFoundError(NotFoundError):
    kind = "Project"


class RelationNotFoundError(NotFoundError):
    kind = "Relation"

    def __init__(self, source: str, target: str) -> None:
        self.source = source
        self.target = target
        super().__init__(f"between {source} and {target}")


class ValidationError(LinctlError):
    """User input was rejected before contacting the service."""

    category = ErrorCategory.VALIDATION


class InvalidUrlError(ValidationError):
    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Invalid URL: {url}")


class MissingFileError(ValidationError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File not found: {path}")


class IndexOutOfBoundsError(ValidationError):
    def __init__(self, index: int, total: int) -> None:
        self.index = index
        self.total = total
        super().__init__(f"Index {index} is out of range (found {total} item(s))")


class OutputDirNotFoundError(ValidationError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Output directory does not exist: {path}")


class UploadFailedError(LinctlError):
    """The signed upload target rejected the file."""

    category = ErrorCategory.TRANSFER

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"File upload failed (status {status}): {body}")


class DownloadFailedError(LinctlError):
    """An asset URL answered with a non-success status."""

    category = ErrorCategory.TRANSFER

    def __init__(self, url: str, status: int) -> None:
        self.url = url
        self.status = status
        super().__init__(f"Download failed (status {status}): {url}")


class MutationFailedError(LinctlError):
    """A mutation returned ``success: false``."""

    category = ErrorCategory.GRAPHQL

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Service reported failure: {action}")
