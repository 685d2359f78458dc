"""Unit tests for Topology."""

import numpy as np
import pytest

from stigsim.core.errors import ConfigurationError
from stigsim.core.topology import Topology, directions_for


class TestTopologyCreation:
    """Tests for Topology construction."""

    def test_2d_shape(self):
        topo = Topology(4)
        assert topo.shape == (4, 4)
        assert topo.n_nodes == 16
        assert topo.arity == 4
        assert topo.neighbors.shape == (16, 4)

    def test_direction_order_2d(self):
        topo = Topology(5)
        assert topo.directions == ["top", "right", "bottom", "left"]

    def test_direction_order_3d(self):
        topo = Topology(3, ndim=3)
        assert topo.directions == ["top", "right", "bottom", "left", "front", "back"]
        assert topo.arity == 6
        assert topo.n_nodes == 27

    def test_generic_dimensions(self):
        assert list(directions_for(1)) == ["axis0-", "axis0+"]
        assert len(directions_for(4)) == 8

    def test_zero_size_rejected(self):
        with pytest.raises(ConfigurationError, match="size"):
            Topology(0)

    def test_bad_ndim_rejected(self):
        with pytest.raises(ConfigurationError, match="ndim"):
            Topology(4, ndim=0)

    def test_neighbors_read_only(self):
        topo = Topology(4)
        with pytest.raises(ValueError):
            topo.neighbors[0, 0] = 3


class TestWraparound:
    """Tests for periodic neighbour lookup."""

    def test_corner_top_wraps_to_last_row(self):
        topo = Topology(4)
        origin = topo.index_of((0, 0))
        assert topo.coords_of(topo.neighbor_of(origin, "top")) == (3, 0)

    def test_corner_left_wraps_to_last_col(self):
        topo = Topology(4)
        origin = topo.index_of((0, 0))
        assert topo.coords_of(topo.neighbor_of(origin, "left")) == (0, 3)

    def test_bottom_right_corner(self):
        topo = Topology(4)
        corner = topo.index_of((3, 3))
        assert topo.coords_of(topo.neighbor_of(corner, "bottom")) == (0, 3)
        assert topo.coords_of(topo.neighbor_of(corner, "right")) == (3, 0)

    def test_interior_neighbors(self):
        topo = Topology(10)
        n = topo.index_of((5, 5))
        neighbors = topo.get_all_neighbors(n)
        assert neighbors["top"] == topo.index_of((4, 5))
        assert neighbors["right"] == topo.index_of((5, 6))
        assert neighbors["bottom"] == topo.index_of((6, 5))
        assert neighbors["left"] == topo.index_of((5, 4))

    def test_row_major_index(self):
        topo = Topology(4)
        assert topo.index_of((1, 2)) == 6
        assert topo.coords_of(6) == (1, 2)

    def test_index_of_wraps(self):
        topo = Topology(4)
        assert topo.index_of((-1, 4)) == topo.index_of((3, 0))

    def test_3d_wrap(self):
        topo = Topology(3, ndim=3)
        origin = topo.index_of((0, 0, 0))
        assert topo.coords_of(topo.neighbor_of(origin, "top")) == (2, 0, 0)
        assert topo.coords_of(topo.neighbor_of(origin, "front")) == (0, 2, 0)
        assert topo.coords_of(topo.neighbor_of(origin, "left")) == (0, 0, 2)


class TestNeighbourRelation:
    """Structural properties of the neighbour table."""

    def test_four_distinct_neighbors(self):
        topo = Topology(4)
        for n in range(topo.n_nodes):
            assert len(set(topo.neighbors[n].tolist())) == 4
            assert n not in topo.neighbors[n]

    def test_opposite_slots_2d(self):
        topo = Topology(4)
        names = topo.directions
        opposite = {names[k]: names[topo.opposite[k]] for k in range(topo.arity)}
        assert opposite == {"top": "bottom", "right": "left", "bottom": "top", "left": "right"}

    @pytest.mark.parametrize("size,ndim", [(1, 2), (2, 2), (4, 2), (7, 2), (3, 3), (5, 1)])
    def test_reverse_mapping(self, size, ndim):
        """Going out through slot k and back through opposite[k] returns home."""
        topo = Topology(size, ndim=ndim)
        nodes = np.arange(topo.n_nodes)
        for k in range(topo.arity):
            there = topo.neighbors[nodes, k]
            back = topo.neighbors[there, topo.opposite[k]]
            assert np.array_equal(back, nodes)

    def test_in_degree_equals_arity(self):
        """Every node is the target of exactly `arity` slots."""
        topo = Topology(5)
        in_degree = np.bincount(topo.neighbors.ravel(), minlength=topo.n_nodes)
        assert np.all(in_degree == topo.arity)

    def test_size_one_self_loops(self):
        topo = Topology(1)
        assert topo.n_nodes == 1
        assert np.all(topo.neighbors == 0)

    def test_connected(self):
        """Breadth-first search from node 0 reaches every node."""
        topo = Topology(6)
        seen = {0}
        frontier = [0]
        while frontier:
            n = frontier.pop()
            for m in topo.neighbors[n].tolist():
                if m not in seen:
                    seen.add(m)
                    frontier.append(m)
        assert len(seen) == topo.n_nodes


class TestIterNodes:
    """Tests for node iteration."""

    def test_iter_nodes_count(self):
        topo = Topology(5)
        assert len(list(topo.iter_nodes())) == 25

    def test_iter_nodes_order(self):
        topo = Topology(3)
        nodes = list(topo.iter_nodes())
        assert nodes[0] == (0, 0)
        assert nodes[1] == (0, 1)
        assert nodes[3] == (1, 0)

    def test_unknown_direction(self):
        topo = Topology(3)
        with pytest.raises(KeyError):
            topo.neighbor_of(0, "up")
