from loguru import logger

from .graph_model import EdgeKind, ShapeKind


class CallGraphLinker:
    """
    Runs once every function has been translated: wires the sketch entry
    points together and overlays dashed call-reference edges.
    """

    def __init__(self, flow_graph, functions, pending_calls, properties):
        self.flow_graph = flow_graph
        self.functions = functions
        self.pending_calls = pending_calls
        self.properties = properties
        self.function_keys = {}
        for name, key in functions:
            self.function_keys.setdefault(name, key)

    def link(self):
        self.link_entry_points()
        self.link_calls()
        return self.flow_graph

    def link_entry_points(self):
        entry_key = self.function_keys.get(self.properties.get("entry_function"))
        main_key = self.function_keys.get(self.properties.get("main_loop_function"))

        if entry_key and self.properties.get("global_start", True):
            self.flow_graph.add_node(
                "GlobalStart", "Start", ShapeKind.TERMINATOR, "startEnd"
            )
            self.flow_graph.add_edge("GlobalStart", f"{entry_key}_Start")

        if entry_key and main_key:
            self.flow_graph.add_edge(f"{entry_key}_End", f"{main_key}_Start")
            if self.properties.get("repeat_main_loop", False):
                self.flow_graph.add_edge(f"{main_key}_End", f"{main_key}_Start")

    def link_calls(self):
        for source, callee in self.pending_calls:
            key = self.function_keys.get(callee)
            if key is None:
                logger.debug(f"No definition for call to {callee}")
                continue
            self.flow_graph.add_edge(source, f"{key}_Start", kind=EdgeKind.CALL)
