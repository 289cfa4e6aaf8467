import pytest

from questionflow.flow_core.dependency_graph import DependencyGraph


@pytest.fixture
def graph() -> DependencyGraph:
    return DependencyGraph()


@pytest.mark.unit
def test_tracks_dependencies_and_dependents(graph):
    graph.add_dependency("q3", "q1")
    graph.add_dependency("q3", "q2")
    graph.add_dependency("q4", "q1")

    assert graph.get_dependencies("q3") == ["q1", "q2"]
    assert graph.get_dependents("q1") == ["q3", "q4"]
    assert graph.get_dependencies("q1") == []
    assert set(graph.get_all_nodes()) == {"q1", "q2", "q3", "q4"}
    assert graph.size() == 2
    assert "q2" in graph


@pytest.mark.unit
def test_three_node_cycle_is_reported_once(graph):
    graph.add_dependency("A", "B")
    graph.add_dependency("B", "C")
    graph.add_dependency("C", "A")

    cycles = graph.find_cycles()

    assert len(cycles) == 1
    assert set(cycles[0]) == {"A", "B", "C"}
    assert cycles[0][0] == cycles[0][-1]


@pytest.mark.unit
def test_self_loop_is_a_cycle(graph):
    graph.add_dependency("A", "A")
    assert graph.find_cycles() == [["A", "A"]]


@pytest.mark.unit
def test_acyclic_graph_has_no_cycles(graph):
    graph.add_dependency("q3", "q2")
    graph.add_dependency("q2", "q1")
    graph.add_dependency("q3", "q1")
    assert graph.find_cycles() == []


@pytest.mark.unit
def test_has_path(graph):
    graph.add_dependency("q3", "q2")
    graph.add_dependency("q2", "q1")

    assert graph.has_path("q3", "q1") is True
    assert graph.has_path("q1", "q3") is False
    assert graph.has_path("q9", "q9") is True


@pytest.mark.unit
def test_clear(graph):
    graph.add_dependency("q2", "q1")
    graph.clear()
    assert graph.get_all_nodes() == []
    assert len(graph) == 0
