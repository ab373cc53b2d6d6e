from shopmaze.game.motion import MovableEntity, tile_to_pixel


def test_tile_to_pixel():
    assert tile_to_pixel((2, 3), 32) == (64.0, 96.0)


def test_begin_move_updates_tile_immediately():
    entity = MovableEntity((1, 1), step=5, tile_size=32)

    assert entity.begin_move((2, 1))
    assert entity.tile == (2, 1)
    assert entity.pixel == (32.0, 32.0)
    assert entity.moving


def test_begin_move_refused_while_moving():
    entity = MovableEntity((1, 1), step=5, tile_size=32)
    entity.begin_move((2, 1))

    assert not entity.begin_move((1, 2))
    assert entity.tile == (2, 1)


def test_advance_snaps_within_one_step():
    entity = MovableEntity((1, 1), step=5, tile_size=32)
    entity.begin_move((2, 1))

    # 32px at 5px per tick: six partial steps, then the snap
    results = [entity.advance() for _ in range(7)]

    assert results == [False] * 6 + [True]
    assert entity.pixel == (64.0, 32.0)
    assert not entity.moving


def test_advance_snaps_when_distance_equals_step():
    entity = MovableEntity((0, 0), step=8, tile_size=32)
    entity.begin_move((1, 0))

    results = [entity.advance() for _ in range(4)]

    assert results == [False, False, False, True]


def test_axes_step_independently():
    entity = MovableEntity((0, 0), step=5, tile_size=32)
    entity.begin_move((1, 1))

    entity.advance()

    assert entity.pixel == (5.0, 5.0)


def test_advance_when_idle_is_noop():
    entity = MovableEntity((1, 1), step=5, tile_size=32)

    assert not entity.advance()
    assert entity.pixel == (32.0, 32.0)


def test_place_teleports():
    entity = MovableEntity((1, 1), step=5, tile_size=32)
    entity.begin_move((2, 1))

    entity.place((3, 3))

    assert entity.tile == (3, 3)
    assert not entity.moving
