import copy

from . import c_nodes

statement_types = copy.deepcopy(c_nodes.statement_types)
statement_types["loop_statement"].append("for_range_loop")
statement_types["function_name"].extend([
    "qualified_identifier",
    "field_identifier",
    "destructor_name",
    "operator_name",
])
statement_types["declarator_wrappers"].append("reference_declarator")

primitive_calls = c_nodes.primitive_calls + [
    "Serial.write",
    "Serial.available",
    "Serial.read",
]


def get_function_name(node):
    """C++ definitions may be named Class::method, ~Class or operator=="""
    return c_nodes.get_function_name(
        node, statement_types["function_name"], statement_types["declarator_wrappers"]
    )


def get_range_header(range_node):
    declarator = c_nodes.node_text(range_node.child_by_field_name("declarator"))
    right = c_nodes.node_text(range_node.child_by_field_name("right"))
    return declarator + " : " + right
