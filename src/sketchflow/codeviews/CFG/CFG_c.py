from loguru import logger

from ...utils import c_nodes
from ...utils.annotations import sanitize
from ...utils.src_parser import node_text
from .CFG import CFGGraph, FlowContext, merge_frontiers
from .graph_model import ShapeKind


class CFGGraph_c(CFGGraph):
    statement_types = c_nodes.statement_types

    def __init__(self, src_language, src_code, properties, root_node, parser):
        super().__init__(src_language, src_code, properties, root_node, parser)

        self.handlers = self.get_handlers()
        self.CFG_c()

    def get_handlers(self):
        return {
            "compound_statement": self.process_sequence,
            "return_statement": self.process_return,
            "break_statement": self.process_break,
            "continue_statement": self.process_continue,
            "if_statement": self.process_if,
            "while_statement": self.process_while,
            "do_statement": self.process_do,
            "for_statement": self.process_for,
            "switch_statement": self.process_switch,
            "ERROR": self.process_error,
        }

    def CFG_c(self):
        """
        Translate every top-level function definition.
        All function names are collected first so calls resolve regardless
        of declaration order.
        """
        definitions = self.collect_functions()
        for (name, key), (_, definition, body) in zip(self.functions, definitions):
            logger.debug(f"Translating function {name}")
            self.translate_function_body(body, name, key, definition)
        return self.flow_graph

    def process_block(self, node, incoming, edge_label=None, context=None):
        """
        Translate node and return its frontier: the ids of every open exit
        that the next construct has to be connected from.
        """
        if node is None:
            return incoming
        if not incoming:
            return []
        if context is None:
            context = FlowContext()
        if (
            node.type in self.statement_types["noise"]
            or c_nodes.is_empty_statement(node)
            or self.labels.is_suppressed(node)
        ):
            return incoming

        handler = self.handlers.get(node.type, self.process_statement)
        return handler(node, incoming, edge_label, context)

    def process_sequence(self, node, incoming, edge_label, context):
        return self.process_statements(node.children, incoming, edge_label, context)

    def process_statements(self, statements, incoming, edge_label, context):
        current = incoming
        next_label = edge_label
        for child in statements:
            if not current:
                break
            if child.type in self.statement_types["noise"] or c_nodes.is_empty_statement(child):
                continue
            result = self.process_block(child, current, next_label, context)
            if result is current:
                # suppressed, the pending label still belongs to the next node
                continue
            current = result
            if child.type in self.statement_types["loop_statement"]:
                next_label = "False"
            else:
                next_label = None
        return current

    def process_return(self, node, incoming, edge_label, context):
        node_id = self.get_index(node)
        value = c_nodes.get_return_value(node)
        label = "return"
        if value is not None:
            label += " " + sanitize(node_text(value))
        label = self.labels.override_or(node, label)

        self.emit(node_id, label, ShapeKind.JUMP, incoming, edge_label, self.span(node))
        self.queue_calls(node_id, value)
        if context.function_exit:
            self.flow_graph.add_edge(node_id, context.function_exit)
        return []

    def process_break(self, node, incoming, edge_label, context):
        node_id = self.get_index(node)
        label = self.labels.override_or(node, "break")
        self.emit(node_id, label, ShapeKind.JUMP, incoming, edge_label, self.span(node))
        if context.breaks is not None:
            context.breaks.append(node_id)
        return []

    def process_continue(self, node, incoming, edge_label, context):
        if context.continues is None:
            return self.process_statement(node, incoming, edge_label, context)
        node_id = self.get_index(node)
        label = self.labels.override_or(node, "continue")
        self.emit(node_id, label, ShapeKind.JUMP, incoming, edge_label, self.span(node))
        context.continues.append(node_id)
        return []

    def condition_label(self, node, condition, default="true"):
        if condition is None:
            return self.labels.override_or(node, default)
        return self.labels.override_or(node, sanitize(node_text(condition)) or default)

    def process_if(self, node, incoming, edge_label, context):
        condition = node.child_by_field_name("condition")
        decision_id = self.get_index(condition if condition is not None else node)
        label = self.condition_label(node, condition, "if")
        self.emit(
            decision_id, label, ShapeKind.DECISION, incoming, edge_label,
            self.span(node), "decision",
        )
        self.queue_calls(decision_id, condition)

        then_ends = self.process_block(
            node.child_by_field_name("consequence"), [decision_id], "Yes", context
        )
        else_body = c_nodes.get_else_body(node)
        if else_body is not None:
            else_ends = self.process_block(else_body, [decision_id], "No", context)
        else:
            else_ends = [decision_id]
        return merge_frontiers(then_ends, else_ends)

    def loop_back(self, ends, target, decision_id):
        for src in ends:
            # an empty body leaves the decision itself in the frontier
            label = "True" if src == decision_id else None
            self.flow_graph.add_edge(src, target, label)

    def process_while(self, node, incoming, edge_label, context):
        condition = node.child_by_field_name("condition")
        decision_id = self.get_index(condition if condition is not None else node)
        label = self.condition_label(node, condition)
        self.emit(
            decision_id, label, ShapeKind.LOOP_DECISION, incoming, edge_label,
            self.span(node), "loopHex",
        )
        self.queue_calls(decision_id, condition)

        loop_context = context.derive_loop()
        body_ends = self.process_block(
            node.child_by_field_name("body"), [decision_id], "True", loop_context
        )
        self.loop_back(
            merge_frontiers(body_ends, loop_context.continues), decision_id, decision_id
        )
        return merge_frontiers([decision_id], loop_context.breaks)

    def process_do(self, node, incoming, edge_label, context):
        condition = node.child_by_field_name("condition")
        body = node.child_by_field_name("body")
        loop_context = context.derive_loop()

        start_line, end_line = self.span(node)
        owners = {
            line: self.flow_graph.line_index.get(line)
            for line in range(start_line, end_line + 1)
        }
        mark = len(self.flow_graph.nodes)
        body_ends = self.process_block(body, incoming, edge_label, loop_context)
        emitted = list(self.flow_graph.nodes)[mark:]
        body_entry = emitted[0] if emitted else None

        decision_id = self.get_index(condition if condition is not None else node)
        label = self.condition_label(node, condition)
        decision_line = (condition if condition is not None else node).start_point[0]
        feeding = merge_frontiers(body_ends, loop_context.continues)
        self.flow_graph.add_node(
            decision_id, label, ShapeKind.LOOP_DECISION, "loopHex", decision_line
        )
        if body_entry is None:
            self.flow_graph.connect(incoming, decision_id, edge_label)
            self.flow_graph.add_edge(decision_id, decision_id, "True")
        else:
            self.flow_graph.connect(feeding, decision_id)
            self.flow_graph.add_edge(decision_id, body_entry, "True")
        self.queue_calls(decision_id, condition)

        # lines of the statement the body left unclaimed belong to the decision
        for line, owner in owners.items():
            if self.flow_graph.line_index.get(line) == owner:
                self.flow_graph.line_index[line] = decision_id
        return merge_frontiers([decision_id], loop_context.breaks)

    def open_loop_scope(self, node):
        title = self.labels.override_or(node, self.properties.get("loop_scope_title", "For Loop"))
        return self.flow_graph.open_scope(f"LoopScope_{node.start_byte}", title, "loop")

    def process_for(self, node, incoming, edge_label, context):
        initializer = node.child_by_field_name("initializer")
        condition = node.child_by_field_name("condition")
        update = node.child_by_field_name("update")
        header_line = node.start_point[0]

        self.open_loop_scope(node)

        current = incoming
        label = edge_label
        if initializer is not None:
            init_id = self.get_index(initializer)
            init_label = sanitize(node_text(initializer).replace(";", ""))
            self.emit(
                init_id, init_label, ShapeKind.PROCESS, incoming, edge_label,
                self.span(initializer),
            )
            self.queue_calls(init_id, initializer)
            current = [init_id]
            label = None

        if condition is not None:
            condition_id = self.get_index(condition)
            condition_label = sanitize(node_text(condition))
        else:
            condition_id = self.get_index(node) + "_COND"
            condition_label = "true"
        self.emit(
            condition_id, condition_label, ShapeKind.LOOP_DECISION, current, label,
            self.span(node), "loopHex",
        )
        self.queue_calls(condition_id, condition)

        loop_context = context.derive_loop()
        body_ends = self.process_block(
            node.child_by_field_name("body"), [condition_id], "True", loop_context
        )
        ends = merge_frontiers(body_ends, loop_context.continues)
        if ends:
            if update is not None:
                update_id = self.get_index(update)
                self.flow_graph.add_node(
                    update_id, sanitize(node_text(update)), ShapeKind.PROCESS,
                    line=update.start_point[0],
                )
                if update.start_point[0] != header_line:
                    self.flow_graph.register_lines(
                        update_id, update.start_point[0], update.end_point[0]
                    )
                self.loop_back(ends, update_id, condition_id)
                self.queue_calls(update_id, update)
                ends = [update_id]
            self.loop_back(ends, condition_id, condition_id)

        self.flow_graph.close_scope()
        return merge_frontiers([condition_id], loop_context.breaks)

    def process_switch(self, node, incoming, edge_label, context):
        condition = node.child_by_field_name("condition")
        body = node.child_by_field_name("body")
        switch_id = self.get_index(condition if condition is not None else node)
        label = self.condition_label(node, condition, "switch")
        self.emit(
            switch_id, label, ShapeKind.DECISION, incoming, edge_label,
            self.span(node), "decision",
        )
        self.queue_calls(switch_id, condition)

        switch_context = context.derive_switch()
        has_default = False
        previous_ends = []
        arms = []
        if body is not None:
            arms = [c for c in body.children if c.type in self.statement_types["switch_arm"]]

        for arm in arms:
            is_default = c_nodes.is_default_case(arm)
            has_default = has_default or is_default
            if is_default:
                arm_label = "default"
            else:
                arm_label = "case " + sanitize(node_text(arm.child_by_field_name("value")))
            arm_label = self.labels.override_or(arm, arm_label)

            arm_id = self.get_index(arm)
            self.emit(
                arm_id, arm_label, ShapeKind.CASE, [switch_id], None, self.span(arm),
            )
            # fallthrough from the previous arm
            self.flow_graph.connect(previous_ends, arm_id)
            previous_ends = self.process_statements(
                c_nodes.get_case_body(arm), [arm_id], None, switch_context
            )

        return merge_frontiers(
            previous_ends,
            [] if has_default else [switch_id],
            switch_context.breaks,
        )

    def process_error(self, node, incoming, edge_label, context):
        node_id = self.get_index(node)
        self.emit(
            node_id, "Syntax Error", ShapeKind.ERROR, incoming, edge_label,
            self.span(node), "error",
        )
        return [node_id]

    def process_statement(self, node, incoming, edge_label, context):
        node_id = self.get_index(node)
        label = self.labels.resolve_label(node)
        shape = ShapeKind.PROCESS
        style = None

        call = c_nodes.get_direct_call(node)
        if call is not None:
            name = c_nodes.get_call_name(call)
            if name in self.function_keys and name not in self.primitive_calls:
                shape = ShapeKind.CALL
                style = "call"

        self.emit(node_id, label, shape, incoming, edge_label, self.span(node), style)
        self.queue_calls(node_id, node)
        return [node_id]

    def queue_calls(self, node_id, node):
        """Remember calls to functions defined in this input for the call linker"""
        if node is None:
            return
        seen = set()
        for call in c_nodes.iter_calls(node):
            name = c_nodes.get_call_name(call)
            if name in self.function_keys and name not in seen:
                seen.add(name)
                self.pending_calls.append((node_id, name))
