import numpy as np
import pytest

from lifegrid.agents import Grass, Predator, Prey
from lifegrid.exceptions import InvalidPositionError
from lifegrid.grid import Cell, Grid, Point2D


def test_point_equality_and_hash():
    assert Point2D(2, 3) == Point2D(2, 3)
    assert Point2D(2, 3) != Point2D(3, 2)
    assert len({Point2D(1, 1), Point2D(1, 1)}) == 1
    assert Point2D(2, 3).offset(-1, 1) == Point2D(1, 4)


def test_point_is_immutable():
    p = Point2D(0, 0)
    with pytest.raises(AttributeError):
        p.x = 4


def test_cell_add_remove_agents():
    cell = Cell(Point2D(4, 5))
    prey = Prey(1, 10)
    predator = Predator(2, 10)
    cell.add_agent(prey)
    cell.add_agent(predator)

    assert cell.pos == Point2D(4, 5)
    assert set(cell.agent_ids()) == {1, 2}
    assert cell.has_agent(prey)
    assert len(cell) == 2

    cell.remove_agent(prey)
    assert not cell.has_agent(prey)
    assert cell.agent_ids() == (2,)


def test_cell_rejects_duplicate_and_missing_agents():
    cell = Cell(Point2D(0, 0))
    prey = Prey(1, 10)
    cell.add_agent(prey)
    with pytest.raises(InvalidPositionError):
        cell.add_agent(prey)
    cell.remove_agent(prey)
    with pytest.raises(InvalidPositionError):
        cell.remove_agent(prey)


def test_cell_contains_grass_flag():
    cell = Cell(Point2D(0, 0))
    assert not cell.contains_grass
    cell.add_agent(Prey(1, 10))
    assert not cell.contains_grass
    grass = Grass(2, 10)
    cell.add_agent(grass)
    assert cell.contains_grass
    cell.remove_agent(grass)
    assert not cell.contains_grass


def test_grid_dimensions_and_iteration():
    grid = Grid(3, 4)
    assert grid.rows == 3
    assert grid.cols == 4
    assert grid.shape == (3, 4)
    assert len(grid) == 12
    assert len({cell.pos for cell in grid}) == 12


@pytest.mark.parametrize("point", [Point2D(-1, 0), Point2D(0, -1), Point2D(3, 0), Point2D(0, 4)])
def test_grid_get_out_of_range(point):
    grid = Grid(3, 4)
    with pytest.raises(InvalidPositionError):
        grid.get(point)


def test_grid_get_returns_cell_at_point():
    grid = Grid(3, 4)
    assert grid.get(Point2D(2, 3)).pos == Point2D(2, 3)


def test_neighbours_are_bounded():
    grid = Grid(5, 5)
    assert len(grid.neighbours(Point2D(2, 2))) == 8
    assert set(grid.neighbours(Point2D(0, 0))) == {Point2D(0, 1), Point2D(1, 0), Point2D(1, 1)}
    assert len(grid.neighbours(Point2D(0, 2))) == 5
    assert len(grid.neighbours(Point2D(4, 4))) == 3


def test_random_adjacent_point_stays_in_neighbourhood():
    grid = Grid(4, 6)
    rng = np.random.default_rng(7)
    for _ in range(200):
        origin = grid.random_point(rng)
        target = grid.random_adjacent_point(origin, rng)
        assert grid.in_bounds(target)
        assert target != origin
        assert origin.chebyshev_dist(target) == 1


def test_random_adjacent_point_reaches_every_neighbour():
    grid = Grid(3, 3)
    rng = np.random.default_rng(0)
    seen = {grid.random_adjacent_point(Point2D(1, 1), rng) for _ in range(500)}
    assert seen == set(grid.neighbours(Point2D(1, 1)))


def test_random_adjacent_point_on_single_cell_grid_raises():
    grid = Grid(1, 1)
    with pytest.raises(InvalidPositionError):
        grid.random_adjacent_point(Point2D(0, 0), np.random.default_rng(0))


def test_random_adjacent_point_on_single_row_grid():
    grid = Grid(1, 3)
    rng = np.random.default_rng(1)
    assert grid.random_adjacent_point(Point2D(0, 0), rng) == Point2D(0, 1)
    assert grid.random_adjacent_point(Point2D(0, 1), rng) in {Point2D(0, 0), Point2D(0, 2)}


def test_random_adjacent_point_outside_grid_raises():
    grid = Grid(3, 3)
    with pytest.raises(InvalidPositionError):
        grid.random_adjacent_point(Point2D(5, 5), np.random.default_rng(0))


def test_random_point_on_empty_grid_raises():
    with pytest.raises(InvalidPositionError):
        Grid(0, 5).random_point(np.random.default_rng(0))


def test_move_agent_to_cell_updates_both_cells_and_position():
    grid = Grid(3, 3)
    prey = Prey(1, 10)
    grid.place_agent(prey, Point2D(0, 0))
    destination = grid.get(Point2D(1, 1))

    grid.move_agent_to_cell(prey, destination)

    assert prey.pos == Point2D(1, 1)
    assert destination.has_agent(prey)
    assert not grid.get(Point2D(0, 0)).has_agent(prey)


def test_move_unregistered_agent_leaves_grid_untouched():
    grid = Grid(3, 3)
    prey = Prey(1, 10)
    prey.pos = Point2D(0, 0)  # never placed
    destination = grid.get(Point2D(1, 1))
    with pytest.raises(InvalidPositionError):
        grid.move_agent_to_cell(prey, destination)
    assert len(destination) == 0
    assert prey.pos == Point2D(0, 0)


def test_remove_agent_clears_its_cell():
    grid = Grid(2, 2)
    prey = Prey(1, 10)
    grid.place_agent(prey, Point2D(1, 0))
    grid.remove_agent(prey)
    assert not grid.get(Point2D(1, 0)).has_agent(prey)
    with pytest.raises(InvalidPositionError):
        grid.remove_agent(prey)


def test_remove_agent_not_on_grid_raises():
    with pytest.raises(InvalidPositionError):
        Grid(2, 2).remove_agent(Prey(1, 10))
