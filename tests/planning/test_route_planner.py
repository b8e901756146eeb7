"""Unit tests for ipsnav.planning.planner (navigation and off-route replanning)."""

import pytest

from ipsnav.config import PlannerConfig
from ipsnav.exceptions import InvalidNode, NoRouteFound
from ipsnav.graph import Edge, Graph, Node
from ipsnav.planning import Route, RoutePlanner


def _floor():
    """Two parallel corridors joined at both ends, plus an isolated node."""
    nodes = (
        Node("A", "Lift", 0.0, 0.0),
        Node("B", "Exit", 20.0, 0.0),
        Node("C", "Cafe", 0.0, 6.0),
        Node("D", "Library", 20.0, 6.0),
        Node("X", "Island", 50.0, 50.0),
    )
    edges = (
        Edge("A", "B", 20.0),
        Edge("A", "C", 6.0),
        Edge("C", "D", 25.0),
        Edge("D", "B", 6.0),
    )
    return Graph(nodes=nodes, edges=edges)


class TestNavigate:
    """Test suite for RoutePlanner.navigate()."""

    def test_by_labels(self):
        planner = RoutePlanner(_floor())

        route = planner.navigate("exit", start_label="LIFT")

        assert isinstance(route, Route)
        assert route.ids == ["A", "B"]
        assert route.cost == pytest.approx(20.0)
        assert route.goal_id == "B"
        assert planner.route is route
        assert planner.instructions[-1] == "You have arrived at Exit"

    def test_current_location_start(self):
        planner = RoutePlanner(_floor())

        route = planner.navigate("Library", position=(1.0, 5.0))

        assert route.start.id == "C"
        assert route.ids == ["C", "D"]

    def test_unknown_label(self):
        planner = RoutePlanner(_floor())

        with pytest.raises(InvalidNode):
            planner.navigate("Gym", start_label="Lift")
        with pytest.raises(InvalidNode):
            planner.navigate("Exit", start_label="Gym")

    def test_no_start_no_position(self):
        with pytest.raises(InvalidNode):
            RoutePlanner(_floor()).navigate("Exit")

    def test_unreachable_keeps_previous_route(self):
        planner = RoutePlanner(_floor())
        previous = planner.navigate("Exit", start_label="Lift")

        with pytest.raises(NoRouteFound):
            planner.navigate("Island", start_label="Lift")
        assert planner.route is previous

    def test_clear(self):
        planner = RoutePlanner(_floor())
        planner.navigate("Exit", start_label="Lift")
        planner.clear()

        assert planner.route is None
        assert planner.instructions == []
        assert planner.distance_to_route(0.0, 0.0) is None


class TestOffRoute:
    """Test suite for RoutePlanner.check_off_route()."""

    def test_on_route_no_replan(self):
        planner = RoutePlanner(_floor())
        planner.navigate("Exit", start_label="Lift")

        assert planner.check_off_route(10.0, 1.5) is None
        assert planner.check_off_route(10.0, 2.0) is None
        assert planner.route.ids == ["A", "B"]

    def test_off_route_replans_from_nearest_node(self):
        planner = RoutePlanner(_floor())
        planner.navigate("Exit", start_label="Lift")

        new_route = planner.check_off_route(2.0, 3.1)

        assert new_route is not None
        assert new_route.start.id == _floor().nearest_node(2.0, 3.1).id == "C"
        assert new_route.ids == ["C", "A", "B"]
        assert new_route.goal_id == "B"
        assert planner.route is new_route

    def test_three_meters_from_straight_route(self):
        g = Graph(
            nodes=(Node("A", "A", 0.0, 0.0), Node("B", "B", 10.0, 0.0), Node("K", "Kiosk", 5.0, 3.5)),
            edges=(Edge("A", "B", 10.0), Edge("K", "B", 6.5)),
        )
        planner = RoutePlanner(g)
        planner.navigate("B", start_label="A")

        new_route = planner.check_off_route(5.0, 3.0)

        assert new_route.start.id == g.nearest_node(5.0, 3.0).id == "K"
        assert new_route.ids == ["K", "B"]

    def test_threshold_from_config(self):
        planner = RoutePlanner(_floor(), PlannerConfig(off_route_threshold_m=5.0))
        planner.navigate("Exit", start_label="Lift")

        assert planner.check_off_route(10.0, 4.0) is None

    def test_without_route(self):
        assert RoutePlanner(_floor()).check_off_route(100.0, 100.0) is None


class TestRoute:
    """Test suite for the Route value."""

    def test_empty(self):
        route = Route(nodes=(), goal_id="B")

        assert route.is_empty
        assert route.start is None
        assert len(route) == 0

    def test_polyline_distance(self):
        g = _floor()
        route = Route(nodes=(g.node_by_id("A"), g.node_by_id("B")), goal_id="B", cost=20.0)

        assert route.polyline == [(0.0, 0.0), (20.0, 0.0)]
        assert route.distance_to(10.0, 3.0) == pytest.approx(3.0)
        assert route.distance_to(-3.0, 4.0) == pytest.approx(5.0)
        assert route.labels == ["Lift", "Exit"]
