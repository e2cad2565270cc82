import re
from dataclasses import dataclass, replace
from typing import List, Optional

from loguru import logger

from ...utils.annotations import LabelResolver, sanitize
from .graph_model import FlowGraph, ShapeKind


@dataclass(frozen=True)
class FlowContext:
    """
    Translation state handed down the recursion. The accumulators are owned
    by the innermost loop (breaks and continues) or switch (breaks only).
    """

    function_name: Optional[str] = None
    function_exit: Optional[str] = None
    breaks: Optional[List[str]] = None
    continues: Optional[List[str]] = None

    def derive_loop(self):
        return replace(self, breaks=[], continues=[])

    def derive_switch(self):
        return replace(self, breaks=[])


def merge_frontiers(*frontiers):
    merged = []
    for frontier in frontiers:
        for node_id in frontier:
            if node_id not in merged:
                merged.append(node_id)
    return merged


class CFGGraph:
    def __init__(self, src_language, src_code, properties, root_node, parser):
        self.src_language = src_language
        self.src_code = src_code
        self.properties = properties
        self.root_node = root_node
        self.parser = parser

        self.flow_graph = FlowGraph()
        self.labels = LabelResolver(
            parser.source_lines, properties.get("label_max_length", 40)
        )
        self.primitive_calls = properties.get("primitive_calls") or parser.primitive_calls
        # (function name, id prefix) in definition order
        self.functions = []
        self.function_keys = {}
        # (calling node id, callee name), resolved by the call linker
        self.pending_calls = []

    def get_index(self, node):
        """Stable node id derived from the node's byte offset and type"""
        return f"N{node.start_byte}_{node.type}"

    def make_function_key(self, name):
        key = re.sub(r"\W", "_", name)
        used = {k for _, k in self.functions}
        candidate = key
        suffix = 2
        while candidate in used:
            candidate = f"{key}_{suffix}"
            suffix += 1
        return candidate

    def emit(self, node_id, label, shape, incoming, edge_label, span, style=None):
        start_line, end_line = span
        self.flow_graph.add_node(node_id, label, shape, style, start_line)
        self.flow_graph.register_lines(node_id, start_line, end_line)
        self.flow_graph.connect(incoming, node_id, edge_label)
        return node_id

    def span(self, node):
        return node.start_point[0], node.end_point[0]

    def collect_functions(self):
        definitions = self.parser.get_functions()
        for name, definition, body in definitions:
            key = self.make_function_key(name)
            self.functions.append((name, key))
            self.function_keys.setdefault(name, key)
        logger.debug(f"Found {len(self.functions)} function definitions")
        return definitions

    def translate_function_body(self, body, function_name, key=None, definition=None):
        if key is None:
            key = self.function_keys.get(function_name) or self.make_function_key(function_name)
        start_id = f"{key}_Start"
        end_id = f"{key}_End"
        header = definition if definition is not None else body

        self.flow_graph.open_scope(f"{key}_Scope", sanitize(function_name), "function")
        self.flow_graph.add_node(
            start_id, sanitize(function_name), ShapeKind.SCOPE_ENTRY, "startEnd",
            header.start_point[0],
        )
        self.flow_graph.register_lines(start_id, header.start_point[0], body.start_point[0])

        context = FlowContext(function_name=function_name, function_exit=end_id)
        ends = self.process_block(body, [start_id], None, context)

        closing_line = body.end_point[0]
        if closing_line in self.flow_graph.line_index:
            closing_line = None
        self.flow_graph.add_node(end_id, "End", ShapeKind.SCOPE_EXIT, "startEnd", closing_line)
        if closing_line is not None:
            self.flow_graph.register_lines(end_id, closing_line)
        self.flow_graph.connect(ends, end_id)
        self.flow_graph.close_scope()

    def process_block(self, node, incoming, edge_label=None, context=None):
        raise NotImplementedError
