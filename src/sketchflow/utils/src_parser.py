def traverse_tree(tree, finest_granularity=None):
    if finest_granularity is None:
        finest_granularity = []
    cursor = tree.walk()

    reached_root = False
    while not reached_root:
        yield cursor.node

        if cursor.node.type not in finest_granularity and cursor.goto_first_child():
            continue

        if cursor.goto_next_sibling():
            continue

        retracing = True
        while retracing:
            if not cursor.goto_parent():
                retracing = False
                reached_root = True

            if cursor.goto_next_sibling():
                retracing = False


def node_text(node):
    if node is None:
        return ""
    return node.text.decode("UTF-8")
