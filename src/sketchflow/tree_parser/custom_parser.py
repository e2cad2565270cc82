from loguru import logger
from tree_sitter import Parser

from .. import get_language_map


class CustomParser:
    def __init__(self, src_language, src_code):
        self.src_language = src_language
        # Non-breaking spaces pasted from the web confuse the grammar
        self.src_code = src_code.replace("\u00a0", " ")
        self.source_lines = [line.rstrip("\r") for line in self.src_code.split("\n")]
        self.tree = None
        self.root_node = None

    def parse(self):
        language_map = get_language_map()
        if self.src_language not in language_map:
            raise ValueError(f"Unsupported language: {self.src_language}")
        parser = Parser(language_map[self.src_language])
        self.tree = parser.parse(bytes(self.src_code, "utf8"))
        self.root_node = self.tree.root_node
        return self.root_node

    def get_function_name(self, node):
        raise NotImplementedError

    def get_functions(self):
        """
        Return (name, definition, body) for every top-level function definition.
        Definitions without a resolvable name or body are skipped.
        """
        functions = []
        for child in self.root_node.children:
            if child.type != "function_definition":
                continue
            name = self.get_function_name(child)
            body = child.child_by_field_name("body")
            if not name or body is None:
                logger.debug(f"Skipping function definition at line {child.start_point[0] + 1}")
                continue
            functions.append((name, child, body))
        return functions
