import random

import pytest

from zeroplugins.midicreate.midi import note_name, parse_note
from zeroplugins.midicreate.practice import ROUNDS, EarTraining


def _wrong(game):
    other = game.target + 1
    return note_name(other) + str(other // 12)


def test_target_range_and_solution():
    for seed in range(50):
        game = EarTraining(rng=random.Random(seed))
        assert 55 <= game.target <= 88
        assert parse_note(game.solution) == game.target


def test_perfect_game():
    game = EarTraining(rng=random.Random(1))
    outcomes = [game.answer(7, game.solution) for _ in range(ROUNDS)]
    assert all(o.correct and o.advanced for o in outcomes)
    assert [o.finished for o in outcomes] == [False] * (ROUNDS - 1) + [True]
    assert game.scoreboard({7: "alice"}) == "alice: 5.0\n"
    with pytest.raises(RuntimeError):
        game.answer(7, "C")


def test_one_mistake_gives_half():
    game = EarTraining(rng=random.Random(2))
    first = game.answer(1, _wrong(game))
    assert not first.correct and not first.advanced and first.errors == 1
    game.answer(1, game.solution)
    assert game.scores[1] == 0.5
    assert game.round == 2


def test_two_mistakes():
    game = EarTraining(rng=random.Random(3))
    game.answer(1, _wrong(game))
    game.answer(1, _wrong(game))
    game.answer(1, game.solution)
    assert game.scores[1] == 0.2


def test_three_mistakes_end_round_without_points():
    game = EarTraining(rng=random.Random(4))
    solution = game.solution
    outcomes = [game.answer(1, _wrong(game)) for _ in range(3)]
    assert outcomes[-1].advanced
    assert outcomes[-1].solution == solution
    assert game.round == 2 and game.errors == 0
    assert 1 not in game.scores


def test_team_mode_allows_ten_mistakes():
    game = EarTraining(team=True, rng=random.Random(5))
    for _ in range(9):
        assert not game.answer(2, _wrong(game)).advanced
    assert game.answer(3, _wrong(game)).advanced
    assert game.scores == {}
    for _ in range(5):
        game.answer(2, _wrong(game))
    game.answer(3, game.solution)
    assert game.scores == {3: 1.0}


def test_scoreboard_falls_back_to_id():
    game = EarTraining(rng=random.Random(6))
    game.answer(42, game.solution)
    assert game.scoreboard() == "42: 1.0\n"


def test_rejects_non_note():
    game = EarTraining(rng=random.Random(7))
    with pytest.raises(ValueError):
        game.answer(1, "hello")
    assert game.errors == 0