from ..tree_parser.custom_parser import CustomParser
from ..utils import c_nodes


class CParser(CustomParser):
    def __init__(self, src_language, src_code):
        super().__init__(src_language, src_code)
        self.primitive_calls = c_nodes.primitive_calls

    def get_function_name(self, node):
        return c_nodes.get_function_name(node)
