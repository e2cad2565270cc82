from ...utils import cpp_nodes
from ...utils.annotations import sanitize
from .CFG import merge_frontiers
from .CFG_c import CFGGraph_c
from .graph_model import ShapeKind


class CFGGraph_cpp(CFGGraph_c):
    """Arduino sketches are C++; adds range-based for loops on top of the C rules."""

    statement_types = cpp_nodes.statement_types

    def get_handlers(self):
        handlers = super().get_handlers()
        handlers["for_range_loop"] = self.process_range_for
        return handlers

    def process_range_for(self, node, incoming, edge_label, context):
        self.open_loop_scope(node)

        decision_id = self.get_index(node)
        label = sanitize(cpp_nodes.get_range_header(node))
        self.emit(
            decision_id, label, ShapeKind.LOOP_DECISION, incoming, edge_label,
            self.span(node), "loopHex",
        )
        self.queue_calls(decision_id, node.child_by_field_name("right"))

        loop_context = context.derive_loop()
        body_ends = self.process_block(
            node.child_by_field_name("body"), [decision_id], "True", loop_context
        )
        self.loop_back(
            merge_frontiers(body_ends, loop_context.continues), decision_id, decision_id
        )

        self.flow_graph.close_scope()
        return merge_frontiers([decision_id], loop_context.breaks)
