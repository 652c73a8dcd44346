"""Tests for the expandable tree layout."""

from lineage import LayoutConfig, Person, PersonGraph, compute_layout


CONFIG = LayoutConfig()


def nodes_by_id(result):
    return {node.person_id: node for node in result.nodes}


class TestBasicLayout:
    """Tests for widths and positions on the sample family."""

    def test_collapsed_root(self, sample_people):
        result = compute_layout(sample_people, "gp1", config=CONFIG)
        assert [n.person_id for n in result.nodes] == ["gp1"]
        root = result.nodes[0]
        assert root.width == 160
        assert (root.x, root.y) == (0, 0)
        assert root.children_ids == ["f1"]
        assert not root.is_expanded
        assert result.total_width == 160
        assert result.total_height == 200

    def test_single_child_centered(self, sample_people):
        result = compute_layout(sample_people, "gp1", expanded={"gp1"}, config=CONFIG)
        nodes = nodes_by_id(result)
        assert set(nodes) == {"gp1", "f1"}
        assert nodes["f1"].x == 0
        assert nodes["f1"].y == 200
        assert nodes["f1"].level == 1
        assert nodes["gp1"].is_expanded
        assert result.total_height == 400

    def test_two_grandchildren(self, sample_people):
        result = compute_layout(sample_people, "gp1", expanded={"gp1", "f1"}, config=CONFIG)
        nodes = nodes_by_id(result)
        assert [n.person_id for n in result.nodes] == ["gp1", "f1", "c1", "c2"]
        assert nodes["c1"].x == -80
        assert nodes["c2"].x == 80
        assert nodes["c1"].y == nodes["c2"].y == 400
        assert nodes["f1"].width == 320
        assert nodes["gp1"].width == 320
        assert result.total_width == 320
        assert result.total_height == 600

    def test_visible_spouse_widens_node(self, sample_people):
        result = compute_layout(
            sample_people, "gp1", expanded={"gp1"}, spouse_visible={"gp1"}, config=CONFIG,
        )
        nodes = nodes_by_id(result)
        assert nodes["gp1"].width == 260
        assert nodes["gp1"].spouse_id == "gp2"
        assert nodes["f1"].x == 0
        assert nodes["f1"].spouse_id is None

    def test_visible_spouse_on_child_propagates(self, sample_people):
        result = compute_layout(
            sample_people, "gp1", expanded={"gp1"}, spouse_visible={"f1"}, config=CONFIG,
        )
        nodes = nodes_by_id(result)
        assert nodes["f1"].width == 260
        assert nodes["f1"].spouse_id == "f2"
        assert nodes["gp1"].width == 260

    def test_origin_offset(self, sample_people):
        result = compute_layout(sample_people, "gp1", expanded={"gp1"}, config=CONFIG, origin=(500, 50))
        nodes = nodes_by_id(result)
        assert (nodes["gp1"].x, nodes["gp1"].y) == (500, 50)
        assert (nodes["f1"].x, nodes["f1"].y) == (500, 250)


class TestWideTree:
    """Tests on a tree with uneven subtrees."""

    @staticmethod
    def people():
        return [
            Person(id="r", name="Root"),
            Person(id="a", name="A", father_id="r"),
            Person(id="b", name="B", father_id="r"),
            Person(id="a1", name="A1", father_id="a"),
            Person(id="a2", name="A2", father_id="a"),
            Person(id="a3", name="A3", father_id="a"),
            Person(id="b1", name="B1", father_id="b"),
        ]

    def test_siblings_do_not_overlap(self):
        result = compute_layout(self.people(), "r", expanded={"r", "a", "b"}, config=CONFIG)
        by_level = {}
        for node in result.nodes:
            by_level.setdefault(node.level, []).append(node)
        for level_nodes in by_level.values():
            level_nodes.sort(key=lambda n: n.x)
            for left, right in zip(level_nodes, level_nodes[1:]):
                assert left.right_edge <= right.left_edge

    def test_parent_centered_over_children(self):
        result = compute_layout(self.people(), "r", expanded={"r", "a", "b"}, config=CONFIG)
        nodes = nodes_by_id(result)
        assert nodes["a"].width == 480
        assert nodes["b"].width == 160
        assert result.total_width == 640
        assert nodes["a"].x == -80
        assert nodes["b"].x == 240
        assert nodes["a2"].x == nodes["a"].x

    def test_deterministic(self):
        first = compute_layout(self.people(), "r", expanded={"r", "a", "b"}, config=CONFIG)
        second = compute_layout(self.people(), "r", expanded={"b", "a", "r"}, config=CONFIG)
        assert first == second


class TestEdgeCases:
    """Tests for unusual inputs."""

    def test_unknown_root(self, sample_people):
        result = compute_layout(sample_people, "nobody", config=CONFIG)
        assert result.nodes == []
        assert result.total_width == 0
        assert result.total_height == 0

    def test_empty_population(self):
        assert compute_layout([], "x", config=CONFIG).nodes == []

    def test_cycle_terminates(self):
        people = [
            Person(id="a", name="A", father_id="b"),
            Person(id="b", name="B", father_id="a"),
        ]
        result = compute_layout(people, "a", expanded={"a", "b"}, config=CONFIG)
        assert [n.person_id for n in result.nodes] == ["a", "b"]
        assert result.nodes[1].children_ids == []

    def test_shared_child_listed_only_where_drawn(self):
        people = [
            Person(id="r", name="R"),
            Person(id="a", name="A", father_id="r"),
            Person(id="b", name="B", father_id="r"),
            Person(id="x", name="X", father_id="a", mother_id="b"),
        ]
        result = compute_layout(people, "r", expanded={"r", "b"}, config=CONFIG)
        nodes = nodes_by_id(result)
        assert nodes["x"].level == 2
        assert nodes["b"].children_ids == ["x"]
        assert nodes["a"].children_ids == []

    def test_root_from_flag(self):
        people = [
            Person(id="a", name="A", spouse_id="b", is_root_family=True),
            Person(id="b", name="B", spouse_id="a", is_root_family=True),
            Person(id="c", name="C", father_id="a", mother_id="b"),
        ]
        result = compute_layout(PersonGraph(people), None, expanded={"a"}, config=CONFIG)
        assert [n.person_id for n in result.nodes] == ["a", "c"]

    def test_no_root_flag(self, sample_people):
        assert compute_layout(sample_people, None, config=CONFIG).nodes == []

    def test_caller_state_not_retained(self, sample_people):
        expanded = {"gp1"}
        result = compute_layout(sample_people, "gp1", expanded=expanded, config=CONFIG)
        expanded.add("f1")
        assert len(result.nodes) == 2

    def test_environment_config(self, sample_people, monkeypatch):
        monkeypatch.setenv("LINEAGE_LAYOUT_NODE_WIDTH", "100")
        result = compute_layout(sample_people, "gp1")
        assert result.total_width == 100
