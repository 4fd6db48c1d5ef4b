"""
Named tools exposing the changelog feed to an RPC-style caller.

Each tool validates its arguments, translates them into a FilterSpec, runs
the query through ChangelogService and serializes the result as JSON text.
Result-count limits are applied last, as a slice over records that are
already filtered and sorted, so a limit never changes which records match.

Errors never escape call_tool(): they are returned as a ToolResponse with
is_error set, so a single bad call cannot take the serving process down.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
import json
import logging
import re
from typing import Any, Awaitable, Callable

from .config import ToolsConfig
from .core.errors import InvalidArgumentError, UnknownToolError
from .core.types import ChangeType, ChangelogRecord, FilterSpec
from .logging_utils import log_event
from .runner import ChangelogService

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_CHANGE_TYPES = [t.value for t in ChangeType]

ToolHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


@dataclass
class ToolDefinition:
    """A tool a caller can invoke by name.

    Attributes:
        name: Tool name used in calls
        description: Human readable summary of what the tool does
        parameters: JSON Schema of the tool's arguments
        handler: Coroutine function receiving validated-on-entry arguments
    """
    name: str
    description: str
    parameters: dict[str, Any]
    handler: ToolHandler

    def to_schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.parameters,
        }


@dataclass
class ToolResponse:
    """Text payload returned for a tool call.

    Attributes:
        text: JSON document on success, "Error: ..." message on failure
        is_error: Whether the call failed
    """
    text: str
    is_error: bool = False

    def json(self) -> Any:
        return json.loads(self.text)

    def to_content(self) -> dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }


def _object_schema(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "type": "object",
        "properties": properties,
        "additionalProperties": False,
    }
    if required:
        schema["required"] = required
    return schema


class ChangelogTools:
    """Registry and dispatcher of the changelog tools."""

    def __init__(
        self,
        service: ChangelogService,
        cfg: ToolsConfig | None = None,
        logger: logging.Logger | None = None,
    ):
        self.service = service
        self.cfg = cfg or service.cfg.tools
        self.logger = logger or service.logger
        self._tools = {tool.name: tool for tool in self._build_tools()}

    def list_tools(self) -> list[dict[str, Any]]:
        return [tool.to_schema() for tool in self._tools.values()]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResponse:
        """Invoke a tool by name and serialize its outcome.

        Any failure, from argument validation to a failed fetch of the
        current period, is reported as an error response.
        """
        try:
            tool = self._tools.get(name)
            if tool is None:
                raise UnknownToolError(f"Unknown tool: {name}")
            if arguments is None:
                arguments = {}
            if not isinstance(arguments, dict):
                raise InvalidArgumentError("Tool arguments must be an object")
            _reject_unknown(arguments, tool.parameters)
            payload = await tool.handler(arguments)
        except Exception as exc:  # noqa: BLE001
            log_event(
                self.logger,
                "Tool call failed",
                level=logging.WARNING,
                event="tool_failed",
                tool=name,
                error=f"{type(exc).__name__}: {exc}",
            )
            return ToolResponse(text=f"Error: {exc}", is_error=True)

        log_event(self.logger, "Tool call done", level=logging.DEBUG, event="tool_done", tool=name)
        return ToolResponse(text=json.dumps(payload, indent=2, ensure_ascii=False))

    def _build_tools(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name="get_changelog_entries",
                description=(
                    "Get changelog entries with optional filtering by date, "
                    "category, type, or search term"
                ),
                parameters=_object_schema({
                    "start_date": {"type": "string", "description": "Start date filter (YYYY-MM-DD format)"},
                    "end_date": {"type": "string", "description": "End date filter (YYYY-MM-DD format)"},
                    "categories": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": 'Filter by categories (e.g., "COPILOT", "ACTIONS")',
                    },
                    "types": {
                        "type": "array",
                        "items": {"type": "string", "enum": _CHANGE_TYPES},
                        "description": "Filter by change types",
                    },
                    "search_term": {
                        "type": "string",
                        "description": "Search term to filter entries by title or category",
                    },
                    "limit": {
                        "type": "number",
                        "description": (
                            f"Maximum number of entries to return "
                            f"(default: {self.cfg.entries_default_limit}, max: {self.cfg.max_limit})"
                        ),
                        "default": self.cfg.entries_default_limit,
                        "maximum": self.cfg.max_limit,
                    },
                }),
                handler=self._get_changelog_entries,
            ),
            ToolDefinition(
                name="get_recent_entries",
                description="Get the most recent changelog entries",
                parameters=_object_schema({
                    "count": {
                        "type": "number",
                        "description": (
                            f"Number of recent entries to return "
                            f"(default: {self.cfg.recent_default_count}, max: {self.cfg.recent_max_count})"
                        ),
                        "default": self.cfg.recent_default_count,
                        "maximum": self.cfg.recent_max_count,
                    },
                    "category": {"type": "string", "description": "Optional category filter"},
                    "type": {"type": "string", "enum": _CHANGE_TYPES, "description": "Optional type filter"},
                }),
                handler=self._get_recent_entries,
            ),
            ToolDefinition(
                name="get_changelog_categories",
                description="Get all available changelog categories",
                parameters=_object_schema({}),
                handler=self._get_changelog_categories,
            ),
            ToolDefinition(
                name="search_changelog",
                description="Search changelog entries by title or category",
                parameters=_object_schema(
                    {
                        "query": {"type": "string", "description": "Search query string"},
                        "limit": {
                            "type": "number",
                            "description": (
                                f"Maximum number of results "
                                f"(default: {self.cfg.search_default_limit}, max: {self.cfg.max_limit})"
                            ),
                            "default": self.cfg.search_default_limit,
                            "maximum": self.cfg.max_limit,
                        },
                    },
                    required=["query"],
                ),
                handler=self._search_changelog,
            ),
            ToolDefinition(
                name="clear_changelog_cache",
                description="Clear the changelog cache to force fresh data on next request",
                parameters=_object_schema({}),
                handler=self._clear_changelog_cache,
            ),
        ]

    async def _get_changelog_entries(self, args: dict[str, Any]) -> dict[str, Any]:
        spec = FilterSpec.build(
            start_date=_optional_date(args, "start_date"),
            end_date=_optional_date(args, "end_date"),
            categories=_optional_str_list(args, "categories"),
            change_types=_optional_change_types(args, "types"),
            search_term=_optional_str(args, "search_term"),
        )
        limit = _limit(args, "limit", self.cfg.entries_default_limit, self.cfg.max_limit)

        result = await self.service.query(spec)
        entries = result.limited(limit)
        return {
            "entries": _serialize(entries),
            "total_count": result.total_count,
            "returned_count": len(entries),
            "categories": list(result.categories),
        }

    async def _get_recent_entries(self, args: dict[str, Any]) -> dict[str, Any]:
        count = _limit(args, "count", self.cfg.recent_default_count, self.cfg.recent_max_count)
        category = _optional_str(args, "category")
        change_type = _optional_str(args, "type")
        spec = FilterSpec.build(
            categories=[category] if category else None,
            change_types=_parse_change_types([change_type], "type") if change_type else None,
        )

        result = await self.service.query(spec)
        entries = result.limited(count)
        return {"entries": _serialize(entries), "count": len(entries)}

    async def _get_changelog_categories(self, args: dict[str, Any]) -> dict[str, Any]:
        result = await self.service.query()
        return {"categories": list(result.categories), "count": len(result.categories)}

    async def _search_changelog(self, args: dict[str, Any]) -> dict[str, Any]:
        term = args.get("query")
        if not isinstance(term, str) or not term.strip():
            raise InvalidArgumentError("Search query is required and must be a string")
        limit = _limit(args, "limit", self.cfg.search_default_limit, self.cfg.max_limit)

        result = await self.service.query(FilterSpec.build(search_term=term))
        entries = result.limited(limit)
        return {
            "query": term,
            "entries": _serialize(entries),
            "total_matches": result.total_count,
            "returned_count": len(entries),
        }

    async def _clear_changelog_cache(self, args: dict[str, Any]) -> dict[str, Any]:
        self.service.clear_cache()
        return {
            "message": "Changelog cache cleared successfully",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


def _serialize(records: tuple[ChangelogRecord, ...]) -> list[dict[str, Any]]:
    return [record.to_dict() for record in records]


def _reject_unknown(args: dict[str, Any], schema: dict[str, Any]) -> None:
    unknown = sorted(set(args) - set(schema.get("properties", {})))
    if unknown:
        raise InvalidArgumentError(f"Unknown argument(s): {', '.join(unknown)}")


def _optional_str(args: dict[str, Any], key: str) -> str | None:
    value = args.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgumentError(f"'{key}' must be a string")
    return value


def _optional_date(args: dict[str, Any], key: str) -> date | None:
    value = _optional_str(args, key)
    if value is None:
        return None
    if not _DATE_RE.match(value):
        raise InvalidArgumentError(f"'{key}' must use the YYYY-MM-DD format, got {value!r}")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidArgumentError(f"'{key}' is not a valid date: {value!r}") from None


def _optional_str_list(args: dict[str, Any], key: str) -> list[str] | None:
    value = args.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise InvalidArgumentError(f"'{key}' must be an array of strings")
    return value


def _optional_change_types(args: dict[str, Any], key: str) -> list[ChangeType] | None:
    values = _optional_str_list(args, key)
    if values is None:
        return None
    return _parse_change_types(values, key)


def _parse_change_types(values: list[str], key: str) -> list[ChangeType]:
    try:
        return [ChangeType.parse(value) for value in values]
    except ValueError as exc:
        raise InvalidArgumentError(f"'{key}': {exc}; expected one of {', '.join(_CHANGE_TYPES)}") from None


def _limit(args: dict[str, Any], key: str, default: int, maximum: int) -> int:
    """Read a positive result count, clamped to maximum."""
    value = args.get(key)
    if value is None:
        return min(default, maximum)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgumentError(f"'{key}' must be a number")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidArgumentError(f"'{key}' must be a whole number")
    if value < 1:
        raise InvalidArgumentError(f"'{key}' must be at least 1")
    return min(int(value), maximum)
