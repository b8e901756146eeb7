"""Unit tests for ipsnav.planning.instructions."""

import pytest

from ipsnav.config import PlannerConfig
from ipsnav.graph import Edge, Graph, Node
from ipsnav.planning import classify_turn, display_label, generate_instructions, turn_angle


def _corridor_graph():
    """Lift -> junction -> turn -> Exit, with a room beside the junction."""
    nodes = (
        Node("n0", "Lift", 0.0, 0.0, type="room"),
        Node("n1", None, 0.0, 10.0, type="junction"),
        Node("n2", "1-10", -3.0, 10.0, type="room"),
        Node("n3", None, 0.0, 20.0, type="turn"),
        Node("n4", "Exit", 10.0, 20.0, type="room"),
    )
    edges = (
        Edge("n0", "n1", 10.0),
        Edge("n1", "n2", 3.0),
        Edge("n1", "n3", 10.0),
        Edge("n3", "n4", 10.0),
    )
    return Graph(nodes=nodes, edges=edges)


class TestTurnAngle:
    """Test suite for turn_angle()."""

    def test_straight(self):
        assert turn_angle((0, 0), (0, 5), (0, 10)) == pytest.approx(0.0)

    def test_right_and_left_map_frame(self):
        assert turn_angle((0, 0), (0, 10), (10, 10)) == pytest.approx(90.0)
        assert turn_angle((0, 0), (0, 10), (-10, 10)) == pytest.approx(-90.0)

    def test_image_frame_flips_sign(self):
        # y grows downwards: walking "up" the image then to +x is a right turn
        assert turn_angle((0, 10), (0, 0), (10, 0), y_axis_up=False) == pytest.approx(90.0)

    def test_u_turn_magnitude(self):
        assert abs(turn_angle((0, 0), (0, 10), (0, 0))) == pytest.approx(180.0)

    def test_classify(self):
        assert classify_turn(45.0) == "Turn right"
        assert classify_turn(-45.0) == "Turn left"
        assert classify_turn(30.0) == "Go straight"
        assert classify_turn(-29.0) == "Go straight"


class TestDisplayLabel:
    """Test suite for display_label()."""

    def test_junction_takes_nearest_room_label(self):
        g = _corridor_graph()

        assert display_label(g.node_by_id("n1"), g) == "1-10"

    def test_turn_node(self):
        g = _corridor_graph()

        assert display_label(g.node_by_id("n3"), g) == "the end of hallway"

    def test_junction_without_graph(self):
        assert display_label(Node("j", None, 0.0, 0.0, type="junction")) == "nearby room"


class TestGenerateInstructions:
    """Test suite for generate_instructions()."""

    def test_short_paths(self):
        g = _corridor_graph()

        assert generate_instructions([], g) == ["Already at destination."]
        assert generate_instructions([g.node_by_id("n0")], g) == ["Already at destination."]

    def test_corridor_route(self):
        g = _corridor_graph()
        path = [g.node_by_id(i) for i in ("n0", "n1", "n3", "n4")]

        lines = generate_instructions(path, g)

        assert lines == [
            "Go straight for 10.0 m towards 1-10",
            "Turn at the end of hallway",
            "Turn right for 10.0 m towards Exit",
            "You have arrived at Exit",
        ]

    def test_left_turn_and_short_leg(self):
        nodes = (
            Node("a", "A", 0.0, 0.0),
            Node("b", "B", 0.0, 5.0),
            Node("c", "C", -0.4, 5.0),
        )
        g = Graph(nodes=nodes, edges=(Edge("a", "b", 5.0), Edge("b", "c", 0.4)))

        lines = generate_instructions(list(nodes), g)

        assert lines == ["Go straight for 5.0 m towards B", "Turn left towards C", "You have arrived at C"]

    def test_duplicate_labels_skipped(self):
        nodes = (
            Node("a", "Lobby", 0.0, 0.0),
            Node("b", "Hall", 0.0, 5.0),
            Node("c", "Hall", 0.0, 10.0),
            Node("d", "Office", 0.0, 15.0),
        )
        g = Graph(nodes=nodes, edges=())

        lines = generate_instructions(list(nodes), g)

        assert lines == [
            "Go straight for 5.0 m towards Hall",
            "Go straight for 5.0 m towards Office",
            "You have arrived at Office",
        ]

    def test_unlabeled_destination(self):
        nodes = (Node("a", "A", 0.0, 0.0), Node("b", None, 3.0, 0.0))

        assert generate_instructions(list(nodes))[-1] == "You have arrived at your destination"

    def test_threshold_from_config(self):
        nodes = (Node("a", "A", 0.0, 0.0), Node("b", "B", 0.0, 10.0), Node("c", "C", 5.0, 20.0))
        config = PlannerConfig(turn_threshold_deg=20.0)

        # about 26.6 degrees to the right
        lines = generate_instructions(list(nodes), config=config)

        assert lines[1].startswith("Turn right")
        assert generate_instructions(list(nodes))[1].startswith("Go straight")
