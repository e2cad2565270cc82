import json

from deepdiff import DeepDiff

from sketchflow import cli
from sketchflow.codeviews.CFG.CFG_driver import CFGDriver, generate_flowchart

SKETCH = """\
void setup() {
  pinMode(13, OUTPUT);
}

void loop() {
  if (digitalRead(2) == HIGH) {
    digitalWrite(13, HIGH);
  } else {
    digitalWrite(13, LOW);
  }
  for (int i = 0; i < 3; i++) {
    blink(i);
  }
  delay(500);
}

void blink(int n) {
  digitalWrite(12, n % 2);
}
"""


def test_unsupported_language_yields_error_graph():
    driver = CFGDriver("rust", "fn main() {}")
    assert driver.error == "Unsupported language: rust"
    assert driver.markup == 'flowchart TD\nError["Error: Unsupported language: rust"]\n'
    assert driver.line_index == {}
    assert driver.to_json() is None
    assert driver.to_dot() is None


def test_line_index_points_at_rendered_nodes():
    markup, line_index = generate_flowchart(SKETCH)
    assert line_index
    for line, node_id in line_index.items():
        assert f"{node_id}" in markup
        assert isinstance(line, int)
    assert "call jumpToLine(" in markup
    code_lines = [n for n, text in enumerate(SKETCH.splitlines()) if text.strip()]
    assert [n for n in code_lines if n not in line_index] == []


def test_function_header_lines_map_to_start_node():
    _, line_index = generate_flowchart(SKETCH)
    assert line_index[0] == "setup_Start"
    assert line_index[4] == "loop_Start"
    assert line_index[16] == "blink_Start"


def test_output_is_deterministic():
    first = CFGDriver("cpp", SKETCH)
    second = CFGDriver("cpp", SKETCH)

    assert first.markup == second.markup
    assert first.line_index == second.line_index
    assert DeepDiff(first.to_json(), second.to_json()) == {}


def test_non_breaking_spaces_are_normalized():
    with_nbsp = SKETCH.replace("  ", "\u00a0\u00a0")
    assert generate_flowchart(with_nbsp) == generate_flowchart(SKETCH)


def test_every_function_gets_a_scope():
    driver = CFGDriver("cpp", SKETCH)
    for name in ("setup", "loop", "blink"):
        assert f'subgraph {name}_Scope ["{name}"]' in driver.markup
        assert f"{name}_Start" in driver.flow_graph.nodes
        assert f"{name}_End" in driver.flow_graph.nodes


def test_json_export_to_file(tmp_path):
    output = tmp_path / "flow.json"
    driver = CFGDriver("cpp", SKETCH, output_file=str(output))
    written = json.loads(output.read_text())
    assert DeepDiff(written, driver.to_json(), ignore_order=True) == {}


def test_cli_writes_mermaid(tmp_path, capsys):
    source = tmp_path / "blink.ino"
    source.write_text(SKETCH)

    assert cli.main([str(source)]) == 0
    out = capsys.readouterr().out
    assert "flowchart TD" in out
    assert "GlobalStart" in out


def test_cli_mapping_and_repeat_loop(tmp_path, capsys):
    source = tmp_path / "blink.ino"
    source.write_text(SKETCH)
    target = tmp_path / "flow.mmd"

    assert cli.main([str(source), "--repeat-loop", "--output", str(target)]) == 0
    assert "loop_End --> loop_Start" in target.read_text()

    assert cli.main([str(source), "--mapping"]) == 0
    mapping = json.loads(capsys.readouterr().out)
    assert mapping["0"] == "setup_Start"


def test_cli_guesses_language_from_extension():
    assert cli.guess_language("main.c") == "c"
    assert cli.guess_language("sketch.ino") == "cpp"
