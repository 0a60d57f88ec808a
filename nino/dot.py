"""
DOT Document Builder
====================

Small builder for Graphviz documents: a Digraph holds attributes, default
attribute blocks and an ordered list of statements (nodes, edges, subgraphs).
The structure can be inspected in tests; `render()` turns it into text.

HTML-like labels are built with the `table`/`tr`/`td`/`font` helpers and
wrapped in `Html` so they are emitted between angle brackets.
"""

import html
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union

INDENT = "  "
_PLAIN_ID = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_KEYWORDS = {"node", "edge", "graph", "digraph", "subgraph", "strict"}


class Html(str):
    """Marker for HTML-like label values."""


def quote(value: Any) -> str:
    text = str(value).replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{text}"'


def format_id(value: str) -> str:
    if _PLAIN_ID.match(value) and value.lower() not in _KEYWORDS:
        return value
    return quote(value)


def format_value(value: Any) -> str:
    if isinstance(value, Html):
        return f"<{value}>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return quote(value)


def format_attrs(attrs: Dict[str, Any]) -> str:
    return ", ".join(f"{key}={format_value(value)}" for key, value in attrs.items())


@dataclass
class Node:
    id: str
    attrs: Dict[str, Any] = field(default_factory=dict)

    def lines(self, depth: int) -> List[str]:
        pad = INDENT * depth
        if not self.attrs:
            return [f"{pad}{quote(self.id)};"]
        return [f"{pad}{quote(self.id)} [{format_attrs(self.attrs)}];"]


@dataclass
class Edge:
    source: str
    target: str
    attrs: Dict[str, Any] = field(default_factory=dict)

    def lines(self, depth: int) -> List[str]:
        pad = INDENT * depth
        stmt = f"{pad}{quote(self.source)} -> {quote(self.target)}"
        if self.attrs:
            stmt += f" [{format_attrs(self.attrs)}]"
        return [stmt + ";"]


Statement = Union[Node, Edge, "Subgraph"]


class Graph:
    """Common body of digraphs and subgraphs."""

    keyword = "graph"

    def __init__(self, name: str, attrs: Optional[Dict[str, Any]] = None):
        self.name = name
        self.attrs: Dict[str, Any] = dict(attrs or {})
        self.defaults: Dict[str, Dict[str, Any]] = {}
        self.statements: List[Statement] = []

    def set(self, key: str, value: Any) -> "Graph":
        self.attrs[key] = value
        return self

    def set_defaults(self, kind: str, attrs: Dict[str, Any]) -> "Graph":
        """Default attribute block for `graph`, `node` or `edge` statements."""
        if kind not in ("graph", "node", "edge"):
            raise ValueError(f"Unknown default block: {kind}")
        self.defaults.setdefault(kind, {}).update(attrs)
        return self

    def node(self, node_id: str, attrs: Optional[Dict[str, Any]] = None, **kwargs) -> Node:
        node = Node(node_id, {**(attrs or {}), **kwargs})
        self.statements.append(node)
        return node

    def edge(self, source: str, target: str, attrs: Optional[Dict[str, Any]] = None, **kwargs) -> Edge:
        edge = Edge(source, target, {**(attrs or {}), **kwargs})
        self.statements.append(edge)
        return edge

    def subgraph(self, name: str, attrs: Optional[Dict[str, Any]] = None) -> "Subgraph":
        sub = Subgraph(name, attrs)
        self.statements.append(sub)
        return sub

    @property
    def nodes(self) -> List[Node]:
        return [s for s in self.statements if isinstance(s, Node)]

    @property
    def edges(self) -> List[Edge]:
        return [s for s in self.statements if isinstance(s, Edge)]

    @property
    def subgraphs(self) -> List["Subgraph"]:
        return [s for s in self.statements if isinstance(s, Subgraph)]

    def walk_nodes(self) -> Iterator[Node]:
        for stmt in self.statements:
            if isinstance(stmt, Node):
                yield stmt
            elif isinstance(stmt, Subgraph):
                yield from stmt.walk_nodes()

    def walk_edges(self) -> Iterator[Edge]:
        for stmt in self.statements:
            if isinstance(stmt, Edge):
                yield stmt
            elif isinstance(stmt, Subgraph):
                yield from stmt.walk_edges()

    def find_node(self, node_id: str) -> Optional[Node]:
        for node in self.walk_nodes():
            if node.id == node_id:
                return node
        return None

    def lines(self, depth: int = 0) -> List[str]:
        pad = INDENT * depth
        inner = INDENT * (depth + 1)
        out = [f"{pad}{self.keyword} {format_id(self.name)} {{"]

        for key, value in self.attrs.items():
            out.append(f"{inner}{key}={format_value(value)};")
        for kind, attrs in self.defaults.items():
            out.append(f"{inner}{kind} [{format_attrs(attrs)}];")
        if (self.attrs or self.defaults) and self.statements:
            out.append("")

        for stmt in self.statements:
            if isinstance(stmt, Subgraph):
                out.extend(stmt.lines(depth + 1))
                out.append("")
            else:
                out.extend(stmt.lines(depth + 1))

        out.append(f"{pad}}}")
        return out


class Subgraph(Graph):
    keyword = "subgraph"

    @property
    def is_cluster(self) -> bool:
        return self.name.startswith("cluster")


class Digraph(Graph):
    keyword = "digraph"

    @property
    def clusters(self) -> List[Subgraph]:
        return [s for s in self.subgraphs if s.is_cluster]

    def render(self) -> str:
        return "\n".join(self.lines()) + "\n"


# ============================================
# HTML-like label helpers
# ============================================


def escape(text: Any) -> str:
    """Escape user data for use inside an HTML-like label."""
    return html.escape(str(text), quote=False)


def _html_attrs(attrs: Dict[str, Any]) -> str:
    parts = []
    for key, value in attrs.items():
        if value is None:
            continue
        name = key.upper().replace("_", "-")
        parts.append(f' {name}="{value}"')
    return "".join(parts)


def font(content: str, point_size: Optional[int] = None, color: Optional[str] = None, bold: bool = False) -> str:
    """Wrap already-escaped content in FONT (and B) tags."""
    if bold:
        content = f"<B>{content}</B>"
    attrs = _html_attrs({"color": color, "point_size": point_size})
    if not attrs:
        return content
    return f"<FONT{attrs}>{content}</FONT>"


def td(content: str = "", **attrs) -> str:
    return f"<TD{_html_attrs(attrs)}>{content}</TD>"


def tr(*cells: str) -> str:
    return "<TR>" + "".join(cells) + "</TR>"


def table(rows: List[str], **attrs) -> str:
    body = "\n".join(rows)
    return f"<TABLE{_html_attrs(attrs)}>\n{body}\n</TABLE>"
