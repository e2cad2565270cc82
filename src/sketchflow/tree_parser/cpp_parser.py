from ..tree_parser.custom_parser import CustomParser
from ..utils import cpp_nodes


class CppParser(CustomParser):
    def __init__(self, src_language, src_code):
        super().__init__(src_language, src_code)
        self.primitive_calls = cpp_nodes.primitive_calls

    def get_function_name(self, node):
        return cpp_nodes.get_function_name(node)
