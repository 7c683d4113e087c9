import random
from collections import deque

import pytest

from dungeoncrawl.sim.coord import Coord, Direction
from dungeoncrawl.sim.errors import ErrorId, GameError
from dungeoncrawl.sim.levels import CellKind, Level, build_level


def _build_level(seed: int = 3, secret_door_inv: int = 0) -> Level:
    return build_level(random.Random(seed), 80, 22, room_num_x=3, room_num_y=3, secret_door_inv=secret_door_inv)


def _reachable(level: Level, start: Coord) -> set[Coord]:
    seen = {start}
    queue = deque([start])
    straight = [Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT]
    while queue:
        current = queue.popleft()
        for direction in straight:
            nxt = current + direction.to_cd()
            if nxt in seen or not level.in_bounds(nxt) or not level.cell(nxt).passable:
                continue
            seen.add(nxt)
            queue.append(nxt)
    return seen


def test_level_has_one_room_per_block_and_one_stair() -> None:
    level = _build_level()

    assert len(level.rooms) == 9
    stairs = [coord for coord, cell in level.iter_cells() if cell.kind is CellKind.STAIR]
    assert stairs == [level.stair]
    assert any(level.stair in room.interior() for room in level.rooms)


def test_rooms_have_walls_and_floor() -> None:
    level = _build_level()

    for room in level.rooms:
        assert room.right - room.left + 1 >= 5
        assert room.bottom - room.top + 1 >= 4
        assert level.cell(Coord(room.left, room.top)).kind is CellKind.WALL_H
        for coord in room.interior():
            assert level.cell(coord).kind in {CellKind.FLOOR, CellKind.STAIR}


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_every_room_is_reachable_from_every_other(seed: int) -> None:
    level = _build_level(seed=seed)

    reachable = _reachable(level, level.rooms[0].interior()[0])

    for room in level.rooms:
        assert set(room.interior()) <= reachable


def test_same_seed_builds_same_layout() -> None:
    assert _build_level(seed=8).to_rows() == _build_level(seed=8).to_rows()
    assert _build_level(seed=8).to_rows() != _build_level(seed=9).to_rows()


def test_secret_doors_are_disguised_as_walls() -> None:
    level = _build_level(secret_door_inv=1)

    hidden = level.hidden_doors()

    # 3x3 rooms are joined by 12 corridors with a door at each end
    assert len(hidden) == 24
    for coord in hidden:
        cell = level.cell(coord)
        assert cell.kind is CellKind.DOOR
        assert not cell.passable
        assert str(cell.tile()) in {"-", "|"}


def test_secret_doors_disabled_with_zero_inverse_rate() -> None:
    level = _build_level(secret_door_inv=0)

    assert level.hidden_doors() == []
    assert sum(1 for _, cell in level.iter_cells() if cell.kind is CellKind.DOOR) == 24


def test_out_of_bounds_cell_access_raises_index() -> None:
    level = _build_level()

    with pytest.raises(GameError) as excinfo:
        level.cell(Coord(80, 0))

    assert excinfo.value.kind is ErrorId.INDEX
    assert len(level.to_rows()) == 22
    assert all(len(row) == 80 for row in level.to_rows())


def test_blocks_too_small_for_rooms_are_rejected() -> None:
    with pytest.raises(GameError) as excinfo:
        build_level(random.Random(1), 80, 22, room_num_x=12, room_num_y=3, secret_door_inv=0)

    assert excinfo.value.kind is ErrorId.INVALID_SETTING
