from sketchflow.codeviews.CFG.call_linker import CallGraphLinker
from sketchflow.codeviews.CFG.CFG_driver import default_properties
from sketchflow.codeviews.CFG.graph_model import EdgeKind, FlowGraph, ShapeKind

SKETCH = """\
void setup() {
  pinMode(13, OUTPUT);
}

void loop() {
  digitalWrite(13, HIGH);
}
"""


def test_setup_and_loop_are_chained(flow):
    result = flow(SKETCH)

    assert result.graph.nodes["GlobalStart"].shape == ShapeKind.TERMINATOR
    assert result.successors("GlobalStart") == ["setup_Start"]
    assert "loop_Start" in result.successors("setup_End")
    assert result.successors("loop_End") == []


def test_repeat_main_loop(flow):
    result = flow(SKETCH, repeat_main_loop=True)
    assert result.successors("loop_End") == ["loop_Start"]


def test_global_start_can_be_disabled(flow):
    result = flow(SKETCH, global_start=False)
    assert "GlobalStart" not in result.graph.nodes
    assert "loop_Start" in result.successors("setup_End")


def test_no_entry_wiring_without_setup(flow):
    result = flow("void loop() {\n  delay(1);\n}\n")
    assert "GlobalStart" not in result.graph.nodes
    assert result.predecessors("loop_Start") == []


def test_custom_entry_functions(flow):
    code = "int main() {\n  run();\n  return 0;\n}\nvoid run() {\n}\n"
    result = flow(code, entry_function="main", main_loop_function="run")
    assert result.successors("GlobalStart") == ["main_Start"]
    assert "run_Start" in result.successors("main_End")


def build_graph():
    graph = FlowGraph()
    for key in ("caller", "helper"):
        graph.add_node(f"{key}_Start", key, ShapeKind.SCOPE_ENTRY)
        graph.add_node(f"{key}_End", "End", ShapeKind.SCOPE_EXIT)
    graph.add_node("N10_expression_statement", "helper()", ShapeKind.CALL)
    return graph


def test_call_edges_resolve_to_function_start():
    graph = build_graph()
    linker = CallGraphLinker(
        graph,
        [("caller", "caller"), ("helper", "helper")],
        [("N10_expression_statement", "helper"), ("N10_expression_statement", "missing")],
        dict(default_properties),
    )
    linker.link()

    calls = graph.call_edges()
    assert len(calls) == 1
    assert calls[0].source == "N10_expression_statement"
    assert calls[0].target == "helper_Start"
    assert calls[0].kind == EdgeKind.CALL
    assert graph.control_edges() == []


def test_duplicate_definitions_resolve_to_first():
    graph = build_graph()
    graph.add_node("helper_2_Start", "helper", ShapeKind.SCOPE_ENTRY)
    linker = CallGraphLinker(
        graph,
        [("helper", "helper"), ("helper", "helper_2")],
        [("N10_expression_statement", "helper")],
        dict(default_properties),
    )
    linker.link()
    assert [e.target for e in graph.call_edges()] == ["helper_Start"]


def test_same_callee_twice_in_one_statement_gives_one_edge(flow):
    code = "int twice(int x) {\n  return x * 2;\n}\nvoid loop() {\n  int y = twice(1) + twice(2);\n}\n"
    result = flow(code)
    statement = result.node("int y = twice(1) + twice(2)")
    assert result.edges(EdgeKind.CALL) == [(statement, "twice_Start", None)]
