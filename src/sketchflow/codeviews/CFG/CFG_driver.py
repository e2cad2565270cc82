from loguru import logger

from .CFG_c import CFGGraph_c
from .CFG_cpp import CFGGraph_cpp
from .call_linker import CallGraphLinker
from ...tree_parser.parser_driver import ParserDriver
from ...utils import postprocessor

default_properties = {
    "entry_function": "setup",
    "main_loop_function": "loop",
    "repeat_main_loop": False,
    "global_start": True,
    # None keeps the grammar's own allow-list
    "primitive_calls": None,
    "label_max_length": 40,
    "loop_scope_title": "For Loop",
    "font_family": "Heebo",
    "layout": "elk",
    "elk": {
        "mergeEdges": "true",
        "cycleBreakingStrategy": "DEPTH_FIRST",
        "nodePlacementStrategy": "NETWORK_SIMPLEX",
    },
    "click_callback": "jumpToLine",
}


class CFGDriver:
    """
    One translation pass over one source snapshot. Every instance owns its
    parser, syntax tree and graph, so concurrent snapshots never interact.
    """

    def __init__(
        self,
        src_language="cpp",
        src_code="",
        output_file=None,
        properties=None,
    ):
        self.src_language = src_language
        self.properties = dict(default_properties)
        if properties:
            self.properties.update(properties)

        self.CFG_map = {
            "c": CFGGraph_c,
            "cpp": CFGGraph_cpp,
        }

        self.CFG = None
        self.flow_graph = None
        self.graph = None
        self.error = None

        try:
            driver = ParserDriver(src_language, src_code)
            self.parser = driver.parser
            self.root_node = driver.root_node
            self.src_code = driver.src_code

            self.CFG = self.CFG_map[self.src_language](
                self.src_language,
                self.src_code,
                self.properties,
                self.root_node,
                self.parser,
            )
            self.flow_graph = CallGraphLinker(
                self.CFG.flow_graph,
                self.CFG.functions,
                self.CFG.pending_calls,
                self.properties,
            ).link()
            self.markup, self.line_index = postprocessor.to_mermaid(
                self.flow_graph, self.properties
            )
            self.graph = self.flow_graph.to_networkx()
        except Exception as e:
            logger.exception("Flowchart generation failed")
            self.error = str(e)
            self.markup, self.line_index = postprocessor.error_graph(self.error)

        if output_file and self.graph is not None:
            self.json = postprocessor.write_networkx_to_json(self.graph, output_file)

    def get_graph(self):
        return self.graph

    def to_json(self):
        if self.graph is None:
            return None
        return postprocessor.networkx_to_json(self.graph)

    def to_dot(self):
        if self.graph is None:
            return None
        return postprocessor.to_dot(self.graph)


def generate_flowchart(src_code, src_language="cpp", properties=None):
    """Return (markup, line_index) for one source snapshot"""
    driver = CFGDriver(src_language, src_code, properties=properties)
    return driver.markup, driver.line_index
