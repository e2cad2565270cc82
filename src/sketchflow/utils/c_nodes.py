from .src_parser import node_text, traverse_tree

statement_types = {
    "noise": ["{", "}", ";", "comment"],
    "loop_statement": [
        "while_statement",
        "for_statement",
        "do_statement",
    ],
    "switch_arm": ["case_statement"],
    "declarator_wrappers": [
        "pointer_declarator",
        "parenthesized_declarator",
        "attributed_declarator",
    ],
    "function_name": ["identifier"],
    # Nested function bodies are not scanned for calls
    "call_scan_barrier": ["compound_statement", "lambda_expression"],
}

# Low-level calls drawn as ordinary process steps
primitive_calls = [
    "pinMode",
    "digitalWrite",
    "digitalRead",
    "analogWrite",
    "analogRead",
    "delay",
    "delayMicroseconds",
    "millis",
    "micros",
    "random",
    "Serial.begin",
    "Serial.print",
    "Serial.println",
]


def get_child_of_type(node, type_list):
    out = list(filter(lambda x: x.type in type_list, node.children))
    if len(out) > 0:
        return out[0]
    else:
        return None


def get_function_declarator(node, wrappers=None):
    """Follow the declarator chain of a function_definition down to its function_declarator"""
    if wrappers is None:
        wrappers = statement_types["declarator_wrappers"]
    declarator = node.child_by_field_name("declarator")
    while declarator is not None and declarator.type != "function_declarator":
        if declarator.type not in wrappers:
            return None
        declarator = declarator.child_by_field_name("declarator") or get_child_of_type(
            declarator, ["function_declarator"] + wrappers
        )
    return declarator


def get_function_name(node, name_types=None, wrappers=None):
    """Extract function name from function_definition"""
    if name_types is None:
        name_types = statement_types["function_name"]
    declarator = get_function_declarator(node, wrappers)
    if declarator is None:
        return None
    name_node = declarator.child_by_field_name("declarator")
    if name_node is None or name_node.type not in name_types:
        return None
    return node_text(name_node)


def is_empty_statement(node):
    """A lone `;`, e.g. the body of `while (!Serial);`"""
    if node.type != "expression_statement":
        return False
    return not any(c.type != "comment" for c in node.named_children)


def get_direct_call(statement):
    """Return the call_expression when the statement is nothing but a call"""
    if statement.type != "expression_statement":
        return None
    children = [c for c in statement.named_children if c.type != "comment"]
    if len(children) == 1 and children[0].type == "call_expression":
        return children[0]
    return None


def get_call_name(call_node):
    function_node = call_node.child_by_field_name("function")
    if function_node is None:
        return None
    return node_text(function_node)


def iter_calls(node):
    """Yield every call_expression below node without entering nested bodies"""
    for child in traverse_tree(node, statement_types["call_scan_barrier"]):
        if child.type == "call_expression":
            yield child


def get_else_body(if_node):
    alternative = if_node.child_by_field_name("alternative")
    if alternative is None:
        return None
    if alternative.type != "else_clause":
        return alternative
    body = [c for c in alternative.named_children if c.type != "comment"]
    return body[-1] if body else None


def is_default_case(case_node):
    return bool(case_node.children) and case_node.children[0].type == "default"


def get_case_body(case_node):
    """Statements of a case arm, i.e. every child after the ':' token"""
    body = []
    started = False
    for child in case_node.children:
        if not started:
            started = child.type == ":"
            continue
        body.append(child)
    return body


def get_return_value(return_node):
    for child in return_node.named_children:
        if child.type != "comment":
            return child
    return None
