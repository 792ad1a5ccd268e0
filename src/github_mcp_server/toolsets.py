"""Toolsets and the immutable tool registry.

Tools are grouped into named toolsets. Each toolset keeps its read tools apart from its
write tools, and `build_registry` flattens the enabled toolsets into a `ToolRegistry`
once at startup. In read-only mode write tools are never added, so a registry built with
`read_only=True` cannot dispatch a mutating operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Iterator, Mapping

from .errors import CONFIG, SafeError

if TYPE_CHECKING:
    from .runtime import Runtime

ALL_TOOLSETS = "all"
DEFAULT_TOOLSETS: tuple[str, ...] = (ALL_TOOLSETS,)

ToolHandler = Callable[["Runtime", dict[str, Any]], Awaitable[dict[str, Any]]]


@dataclass(frozen=True, slots=True)
class ToolDescriptor:
    """A named tool: its schema, its read-only classification and its handler."""

    name: str
    description: str
    input_schema: dict[str, Any]
    read_only: bool
    handler: ToolHandler
    title: str | None = None


class Toolset:
    """A named group of read and write tools."""

    def __init__(self, name: str, description: str) -> None:
        self.name = name
        self.description = description
        self._read_tools: list[ToolDescriptor] = []
        self._write_tools: list[ToolDescriptor] = []

    def add_read_tools(self, *tools: ToolDescriptor) -> Toolset:
        """Add read tools; every one must be annotated read-only."""
        for tool in tools:
            if not tool.read_only:
                raise ValueError(f"tool ({tool.name}) must be annotated as read-only")
        self._read_tools.extend(tools)
        return self

    def add_write_tools(self, *tools: ToolDescriptor) -> Toolset:
        """Add write tools; none may be annotated read-only."""
        for tool in tools:
            if tool.read_only:
                raise ValueError(f"tool ({tool.name}) is incorrectly annotated as read-only")
        self._write_tools.extend(tools)
        return self

    @property
    def read_tools(self) -> tuple[ToolDescriptor, ...]:
        return tuple(self._read_tools)

    @property
    def write_tools(self) -> tuple[ToolDescriptor, ...]:
        return tuple(self._write_tools)

    def active_tools(self, *, read_only: bool) -> tuple[ToolDescriptor, ...]:
        """Return the tools this toolset contributes in the given mode."""
        if read_only:
            return self.read_tools
        return self.read_tools + self.write_tools


class ToolRegistry:
    """The tool set exposed for the lifetime of the process."""

    def __init__(self, *, read_only: bool, enabled_toolsets: tuple[str, ...], tools: tuple[ToolDescriptor, ...]) -> None:
        by_name: dict[str, ToolDescriptor] = {}
        for tool in tools:
            if tool.name in by_name:
                raise ValueError(f"duplicate tool name: {tool.name}")
            by_name[tool.name] = tool
        self._read_only = read_only
        self._enabled_toolsets = enabled_toolsets
        self._tools = tools
        self._by_name: Mapping[str, ToolDescriptor] = MappingProxyType(by_name)

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def enabled_toolsets(self) -> tuple[str, ...]:
        return self._enabled_toolsets

    @property
    def tools(self) -> tuple[ToolDescriptor, ...]:
        return self._tools

    def names(self) -> list[str]:
        return [t.name for t in self._tools]

    def get(self, name: str) -> ToolDescriptor | None:
        return self._by_name.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)


def resolve_enabled_toolsets(
    toolsets: Iterable[Toolset],
    requested: Iterable[str],
    *,
    always_enabled: Iterable[str] = (),
) -> tuple[str, ...]:
    """Return the names of the enabled toolsets in declaration order.

    `all` anywhere in `requested` enables every toolset. An unknown name is a
    configuration error.
    """
    declared = [ts.name for ts in toolsets]
    wanted = {name.strip() for name in requested if name.strip()}
    if ALL_TOOLSETS in wanted:
        return tuple(declared)

    unknown = sorted(wanted - set(declared))
    if unknown:
        raise SafeError(
            code=CONFIG,
            message=f"toolset {unknown[0]} does not exist",
            hint=f"Available toolsets: {', '.join(declared)}",
        )
    wanted.update(always_enabled)
    return tuple(name for name in declared if name in wanted)


def build_registry(
    toolsets: Iterable[Toolset],
    *,
    read_only: bool,
    enabled: Iterable[str] = DEFAULT_TOOLSETS,
    always_enabled: Iterable[str] = (),
) -> ToolRegistry:
    """Assemble the registry from the enabled toolsets.

    Tools appear in toolset declaration order, read tools before write tools.
    """
    toolsets = tuple(toolsets)
    enabled_names = resolve_enabled_toolsets(toolsets, enabled, always_enabled=always_enabled)

    collected: list[ToolDescriptor] = []
    for toolset in toolsets:
        if toolset.name in enabled_names:
            collected.extend(toolset.active_tools(read_only=read_only))

    return ToolRegistry(read_only=read_only, enabled_toolsets=enabled_names, tools=tuple(collected))
