"""
Shared fixtures: build a flowchart from a snippet and query the result.
"""

import pytest

from sketchflow.codeviews.CFG.CFG_driver import CFGDriver
from sketchflow.codeviews.CFG.graph_model import EdgeKind


class FlowResult:
    def __init__(self, driver):
        self.driver = driver
        self.graph = driver.flow_graph
        self.markup = driver.markup
        self.line_index = driver.line_index

    def node(self, label):
        for node in self.graph.nodes.values():
            if node.label == label:
                return node.id
        raise AssertionError(f"no node labelled {label!r}")

    def labels(self):
        return [node.label for node in self.graph.nodes.values()]

    def edges(self, kind=EdgeKind.CONTROL):
        return [(e.source, e.target, e.label) for e in self.graph.edges if e.kind == kind]

    def predecessors(self, node_id):
        return [src for src, dst, _ in self.edges() if dst == node_id]

    def successors(self, node_id):
        return [dst for src, dst, _ in self.edges() if src == node_id]

    def edge_label(self, src, dst):
        for source, target, label in self.edges():
            if source == src and target == dst:
                return label
        raise AssertionError(f"no edge {src} -> {dst}")


@pytest.fixture
def flow():
    def build(code, lang="cpp", **properties):
        driver = CFGDriver(lang, code, properties=properties)
        assert driver.error is None, driver.error
        return FlowResult(driver)

    return build
