import copy
import json

import networkx as nx
from networkx.readwrite import json_graph

from ..codeviews.CFG.graph_model import EdgeKind, ShapeKind
from .annotations import sanitize

shape_delimiters = {
    ShapeKind.PROCESS: ("(", ")"),
    ShapeKind.CALL: ("([", "])"),
    ShapeKind.DECISION: ("{", "}"),
    ShapeKind.LOOP_DECISION: ("{{", "}}"),
    ShapeKind.SCOPE_ENTRY: ("([", "])"),
    ShapeKind.SCOPE_EXIT: ("(((", ")))"),
    ShapeKind.ERROR: ("[", "]"),
    ShapeKind.JUMP: ("[", "]"),
    ShapeKind.CASE: ("[", "]"),
    ShapeKind.TERMINATOR: ("((", "))"),
}

question_shapes = [ShapeKind.DECISION, ShapeKind.LOOP_DECISION]

class_definitions = {
    "startEnd": "stroke-width:2px",
    "loopHex": "stroke-width:1.5px",
    "decision": "stroke-width:1.5px",
    "call": "stroke-dasharray:4 2",
    "error": "fill:#fdd,stroke:#c00",
}


def mermaid_header(properties):
    lines = [
        "---",
        "config:",
        f"  fontFamily: {properties.get('font_family', 'Heebo')}",
        f"  layout: {properties.get('layout', 'elk')}",
    ]
    elk = properties.get("elk") or {}
    if elk:
        lines.append("  elk:")
        for key, value in elk.items():
            lines.append(f"    {key}: {value}")
    lines.append("---")
    lines.append("flowchart TD")
    for name, style in class_definitions.items():
        lines.append(f"classDef {name} {style};")
    return lines


def mermaid_label(node):
    label = node.label.replace("\n", "<br/>")
    if node.shape in question_shapes:
        label += "?"
    return label


def node_statement(node):
    left, right = shape_delimiters[node.shape]
    statement = f'{node.id}{left}"{mermaid_label(node)}"{right}'
    if node.style:
        statement += f":::{node.style}"
    return statement


def edge_statement(edge):
    if edge.kind == EdgeKind.CALL:
        return f"{edge.source} -.-> {edge.target}"
    if edge.label:
        return f"{edge.source} -->|{edge.label}| {edge.target}"
    return f"{edge.source} --> {edge.target}"


def item_lines(flow_graph, item_id, depth=0):
    indent = "    " * depth
    if item_id not in flow_graph.scopes:
        return [indent + node_statement(flow_graph.nodes[item_id])]

    scope = flow_graph.scopes[item_id]
    title = scope.title.replace("\n", "<br/>")
    lines = [f'{indent}subgraph {scope.id} ["{title}"]']
    for member in scope.members:
        lines.extend(item_lines(flow_graph, member, depth + 1))
    lines.append(f"{indent}end")
    return lines


def to_mermaid(flow_graph, properties=None):
    """
    Render a FlowGraph as Mermaid flowchart markup.
    Returns (markup, line_index) where line_index maps 0-based source lines
    to node ids.
    """
    if properties is None:
        properties = {}
    callback = properties.get("click_callback", "jumpToLine")

    lines = mermaid_header(properties)
    for item_id in flow_graph.top_level:
        lines.extend(item_lines(flow_graph, item_id))
    for edge in flow_graph.control_edges():
        lines.append(edge_statement(edge))
    for node in flow_graph.nodes.values():
        if node.line is not None:
            lines.append(f"click {node.id} call {callback}({node.line + 1})")
    for edge in flow_graph.call_edges():
        lines.append(edge_statement(edge))

    return "\n".join(lines) + "\n", dict(flow_graph.line_index)


def error_graph(message):
    return f'flowchart TD\nError["Error: {sanitize(message)}"]\n', {}


def networkx_to_json(graph):
    """Convert a networkx graph to a json object"""
    graph_json = json_graph.node_link_data(graph)
    return graph_json


def write_networkx_to_json(graph, filename):
    """Convert a networkx graph to a json object"""
    graph_json = json_graph.node_link_data(graph)
    with open(filename, "w") as f:
        json.dump(graph_json, f)
    return graph_json


def to_dot(og_graph):
    graph = copy.deepcopy(og_graph)

    # Labels are already sanitized; only DOT quoting is left to do
    for node in graph.nodes:
        if "label" in graph.nodes[node]:
            label = str(graph.nodes[node]["label"]).replace("\n", "\\n")
            graph.nodes[node]["label"] = f'"{label}"'

    for u, v, key, data in graph.edges(keys=True, data=True):
        if data.get("label"):
            graph.edges[u, v, key]["label"] = f'"{data["label"]}"'
        else:
            graph.edges[u, v, key].pop("label", None)
        if data.get("edge_type") == EdgeKind.CALL.value:
            graph.edges[u, v, key]["style"] = "dashed"

    for node in graph.nodes:
        for attr_name in ["shape_kind", "style_class", "scope"]:
            value = graph.nodes[node].get(attr_name)
            if value:
                graph.nodes[node][attr_name] = f'"{value}"'
            else:
                graph.nodes[node].pop(attr_name, None)

    return nx.nx_pydot.to_pydot(graph).to_string()
