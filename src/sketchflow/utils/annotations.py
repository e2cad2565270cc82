import re

from .src_parser import node_text

OVERRIDE_MARKER = "//\\"
SUPPRESS_MARKER = "//*"

override_pattern = re.compile(re.escape(OVERRIDE_MARKER) + r"\s*(.*)$")


def sanitize(text):
    """Make text safe to embed in a double-quoted graph label"""
    if not text:
        return ""
    text = text.replace("\\", "\\\\")
    text = text.replace('"', "'")
    text = re.sub(r"[\r\n]+", " ", text)
    return text.strip()


def parse_override(line):
    """
    Return the free text following the override marker on a source line,
    or None when the line carries no (non-empty) override.
    """
    match = override_pattern.search(line or "")
    if match is None:
        return None
    text = match.group(1).strip()
    return text or None


def is_suppressed_line(line):
    return (line or "").strip().endswith(SUPPRESS_MARKER)


class LabelResolver:
    """Derives display labels for syntax nodes, honouring source annotations."""

    def __init__(self, source_lines, max_length=40):
        self.source_lines = source_lines
        self.max_length = max_length

    def line(self, row):
        if 0 <= row < len(self.source_lines):
            return self.source_lines[row]
        return ""

    def override_text(self, node):
        """Override label for the node's start line; commas become line breaks"""
        text = parse_override(self.line(node.start_point[0]))
        if text is None:
            return None
        return "\n".join(part.strip() for part in sanitize(text).split(","))

    def is_suppressed(self, node):
        return is_suppressed_line(self.line(node.start_point[0]))

    def source_label(self, node):
        text = node_text(node).split("\n")[0].strip().replace(";", "")
        return sanitize(text[: self.max_length])

    def resolve_label(self, node, fallback=None):
        override = self.override_text(node)
        if override is not None:
            return override
        label = self.source_label(node)
        if len(label) < 2:
            label = fallback or node.type
        return label

    def override_or(self, node, default):
        override = self.override_text(node)
        return default if override is None else override
