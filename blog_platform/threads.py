"""
Assembly of flat comment listings into reply trees.
"""


def build_tree(comments):
    """
    Nest a flat, ordered list of comment records into threads.

    Each record is a mapping with at least ``id`` and ``parent_id``.
    Returns copies of the root records (``parent_id`` is None), each with
    a ``replies`` list holding its direct children, which in turn carry
    their own ``replies``. Siblings keep the order they had in the input.

    Replies whose parent is not part of the listing are dropped, as is a
    record that names itself as its parent. When an id repeats, replies
    attach to its first occurrence. The input is not modified.
    """
    nodes = []
    by_id = {}
    roots = []

    for record in comments:
        node = dict(record, replies=[])
        nodes.append(node)
        by_id.setdefault(node["id"], node)
        if node.get("parent_id") is None:
            roots.append(node)

    for node in nodes:
        parent_id = node.get("parent_id")
        if parent_id is None or parent_id == node["id"]:
            continue
        parent = by_id.get(parent_id)
        if parent is not None:
            parent["replies"].append(node)

    return roots
