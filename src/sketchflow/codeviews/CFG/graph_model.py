from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

import networkx as nx
from loguru import logger


class ShapeKind(str, Enum):
    PROCESS = "process"
    DECISION = "decision"
    LOOP_DECISION = "loop_decision"
    CALL = "call"
    SCOPE_ENTRY = "scope_entry"
    SCOPE_EXIT = "scope_exit"
    ERROR = "error"
    JUMP = "jump"
    CASE = "case"
    TERMINATOR = "terminator"


class EdgeKind(str, Enum):
    CONTROL = "control"
    CALL = "call"


@dataclass
class GraphNode:
    id: str
    label: str
    shape: ShapeKind = ShapeKind.PROCESS
    style: Optional[str] = None
    line: Optional[int] = None
    scope: Optional[str] = None


@dataclass
class GraphEdge:
    source: str
    target: str
    label: Optional[str] = None
    kind: EdgeKind = EdgeKind.CONTROL


@dataclass
class Scope:
    id: str
    title: str
    kind: str
    parent: Optional[str] = None
    members: List[str] = field(default_factory=list)


class FlowGraph:
    """
    Nodes, edges, scopes and the line index produced by one translation pass.
    Insertion order is preserved everywhere so serialization is deterministic.
    """

    def __init__(self):
        self.nodes: Dict[str, GraphNode] = {}
        self.edges: List[GraphEdge] = []
        self.scopes: Dict[str, Scope] = {}
        self.top_level: List[str] = []
        self.line_index: Dict[int, str] = {}
        self.scope_stack: List[str] = []

    @property
    def current_scope(self):
        return self.scope_stack[-1] if self.scope_stack else None

    def _place(self, item_id):
        if self.current_scope is None:
            self.top_level.append(item_id)
        else:
            self.scopes[self.current_scope].members.append(item_id)

    def add_node(self, node_id, label, shape=ShapeKind.PROCESS, style=None, line=None):
        if node_id in self.nodes:
            logger.warning(f"Duplicate node id {node_id} ignored")
            return self.nodes[node_id]
        node = GraphNode(node_id, label, shape, style, line, self.current_scope)
        self.nodes[node_id] = node
        self._place(node_id)
        return node

    def add_edge(self, src, dest, label=None, kind=EdgeKind.CONTROL):
        if src is None or dest is None:
            logger.error(f"Attempting to add edge with None: {src} -> {dest}")
            return
        self.edges.append(GraphEdge(src, dest, label, kind))

    def connect(self, frontier, dest, label=None):
        for src in frontier:
            self.add_edge(src, dest, label)

    def open_scope(self, scope_id, title, kind):
        self.scopes[scope_id] = Scope(scope_id, title, kind, self.current_scope)
        self._place(scope_id)
        self.scope_stack.append(scope_id)
        return self.scopes[scope_id]

    def close_scope(self):
        return self.scope_stack.pop()

    def register_lines(self, node_id, start_line, end_line=None):
        if end_line is None:
            end_line = start_line
        for line in range(start_line, end_line + 1):
            self.line_index[line] = node_id

    def control_edges(self):
        return [e for e in self.edges if e.kind == EdgeKind.CONTROL]

    def call_edges(self):
        return [e for e in self.edges if e.kind == EdgeKind.CALL]

    def to_networkx(self):
        graph = nx.MultiDiGraph()
        for node in self.nodes.values():
            graph.add_node(
                node.id,
                label=node.label,
                shape_kind=node.shape.value,
                style_class=node.style or "",
                line=-1 if node.line is None else node.line,
                scope=node.scope or "",
            )
        for edge in self.edges:
            graph.add_edge(
                edge.source,
                edge.target,
                label=edge.label or "",
                edge_type=edge.kind.value,
            )
        return graph
