"""
Tests for comment tree assembly.
"""
from blog_platform.threads import build_tree


def record(id, parent_id=None):
    return {"id": id, "parent_id": parent_id, "content": f"comment {id}"}


def ids(nodes):
    return [node["id"] for node in nodes]


class TestBuildTree:
    """Tests for build_tree()."""

    def test_empty(self):
        assert build_tree([]) == []

    def test_all_roots_stay_flat(self):
        tree = build_tree([record(3), record(2), record(1)])
        assert ids(tree) == [3, 2, 1]
        assert all(node["replies"] == [] for node in tree)

    def test_orphan_dropped(self):
        tree = build_tree([record(1), record(2, parent_id=1), record(3, parent_id=99)])

        assert ids(tree) == [1]
        assert ids(tree[0]["replies"]) == [2]
        assert tree[0]["replies"][0]["replies"] == []

    def test_sibling_order_follows_input(self):
        flat = [record(5, 1), record(1), record(4, 1), record(3, 1)]
        tree = build_tree(flat)
        assert ids(tree[0]["replies"]) == [5, 4, 3]

    def test_deep_chain(self):
        flat = [record(4, 3), record(3, 2), record(2, 1), record(1)]
        node = build_tree(flat)[0]
        depth = 0
        while node["replies"]:
            node = node["replies"][0]
            depth += 1
        assert depth == 3
        assert node["id"] == 4

    def test_self_reference_dropped(self):
        tree = build_tree([record(1), record(2, parent_id=2)])
        assert ids(tree) == [1]
        assert tree[0]["replies"] == []

    def test_cycle_unreachable(self):
        tree = build_tree([record(1), record(2, parent_id=3), record(3, parent_id=2)])
        assert ids(tree) == [1]

    def test_input_not_modified(self):
        flat = [record(1), record(2, parent_id=1)]
        build_tree(flat)
        assert "replies" not in flat[0]
        assert "replies" not in flat[1]

    def test_repeated_id_keeps_replies_on_listed_root(self):
        flat = [record(1), record(2, parent_id=1), record(1)]
        tree = build_tree(flat)
        assert ids(tree) == [1, 1]
        assert ids(tree[0]["replies"]) == [2]

    def test_repeated_reply_attached_each_time(self):
        flat = [record(1), record(2, parent_id=1), record(2, parent_id=1)]
        tree = build_tree(flat)
        assert ids(tree[0]["replies"]) == [2, 2]

    def test_other_fields_carried(self):
        tree = build_tree([record(1)])
        assert tree[0]["content"] == "comment 1"
