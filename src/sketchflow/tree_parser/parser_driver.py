from .c_parser import CParser
from .cpp_parser import CppParser


class ParserDriver:
    def __init__(self, src_language, src_code):
        self.src_language = src_language
        self.parser_map = {
            "c": CParser,
            "cpp": CppParser,
        }
        if self.src_language not in self.parser_map:
            raise ValueError(f"Unsupported language: {self.src_language}")

        self.parser = self.parser_map[self.src_language](src_language, src_code)
        self.root_node = self.parser.parse()
        self.src_code = self.parser.src_code
