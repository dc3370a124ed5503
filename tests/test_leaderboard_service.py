from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import InvalidInputError
from app.db.models.games import Game


def _set_created_at(session, game_id, when):
    game = session.get(Game, game_id)
    game.created_at = when
    session.add(game)
    session.commit()


def test_only_completed_games_are_ranked(play_game, leaderboard_service):
    finished = play_game([(6, 6)] * 10, finish=True, player_name="winner")
    play_game([(6, 6)] * 10)                 # 10 lancers mais pas terminée
    play_game([(6, 6)] * 4)                  # en cours

    page = leaderboard_service.list_leaderboard(limit=50, page=1)

    assert [g.id for g in page.games] == [finished.id]
    assert page.pagination.total == 1
    assert page.pagination.total_pages == 1


def test_ranked_by_score_descending(play_game, leaderboard_service):
    low = play_game([(1, 1)] * 10, finish=True)
    high = play_game([(6, 6)] * 10, finish=True)
    mid = play_game([(3, 4)] * 10, finish=True)

    page = leaderboard_service.list_leaderboard(limit=10, page=1)

    assert [g.id for g in page.games] == [high.id, mid.id, low.id]
    assert [g.total_score for g in page.games] == [120, 70, 20]


def test_equal_scores_most_recent_first(play_game, leaderboard_service, session):
    older = play_game([(3, 4)] * 10, finish=True, player_name="alice")
    newer = play_game([(4, 3)] * 10, finish=True, player_name="bob")
    base = datetime(2024, 1, 15, 10, tzinfo=timezone.utc)
    _set_created_at(session, older.id, base)
    _set_created_at(session, newer.id, base + timedelta(hours=1))

    page = leaderboard_service.list_leaderboard(limit=10, page=1)

    assert [g.player_name for g in page.games] == ["Bob", "Alice"]


def test_pagination(play_game, leaderboard_service):
    for score_die in range(1, 6):
        play_game([(score_die, score_die)] * 10, finish=True)

    first = leaderboard_service.list_leaderboard(limit=2, page=1)
    third = leaderboard_service.list_leaderboard(limit=2, page=3)
    beyond = leaderboard_service.list_leaderboard(limit=2, page=4)

    assert [g.total_score for g in first.games] == [100, 80]
    assert [g.total_score for g in third.games] == [20]
    assert beyond.games == []
    assert first.pagination.model_dump() == {"page": 1, "limit": 2, "total": 5, "total_pages": 3}


def test_empty_leaderboard(leaderboard_service):
    page = leaderboard_service.list_leaderboard(limit=50, page=1)
    assert page.games == []
    assert page.pagination.total == 0
    assert page.pagination.total_pages == 0


@pytest.mark.parametrize("limit, page", [(0, 1), (101, 1), (10, 0), (-1, -1)])
def test_invalid_pagination(leaderboard_service, limit, page):
    with pytest.raises(InvalidInputError):
        leaderboard_service.list_leaderboard(limit=limit, page=page)


# -----------------------------
# Stats
# -----------------------------

def test_stats_without_games(leaderboard_service):
    stats = leaderboard_service.compute_stats()
    assert stats.total_games == 0
    assert stats.total_score_all_time == 0
    assert stats.average_score_per_game == 0
    assert stats.sum_distribution == [0] * 13
    assert stats.pair_distribution == [[0] * 6 for _ in range(6)]


def test_stats_histograms(play_game, leaderboard_service):
    pairs = [(3, 4), (2, 5), (1, 1), (6, 6), (1, 6), (3, 4), (2, 2), (5, 5), (4, 5), (3, 3)]
    game = play_game(pairs, finish=True)

    stats = leaderboard_service.compute_stats()

    assert stats.total_games == 1
    assert stats.total_score_all_time == game.total_score == sum(a + b for a, b in pairs)
    assert stats.average_score_per_game == game.total_score
    assert stats.sum_distribution[7] == 4
    assert stats.sum_distribution[2] == 1
    assert stats.sum_distribution[12] == 1
    assert sum(stats.sum_distribution) == 10
    assert stats.sum_distribution[0] == stats.sum_distribution[1] == 0

    # (1, 6) compte en [0][5] seulement, pas en [5][0]
    assert stats.pair_distribution[0][5] == 1
    assert stats.pair_distribution[5][0] == 0
    assert stats.pair_distribution[2][3] == 2
    assert sum(map(sum, stats.pair_distribution)) == 10


def test_stats_ignore_unfinished_games(play_game, leaderboard_service):
    play_game([(1, 1)] * 10, finish=True)
    play_game([(6, 6)] * 10)
    play_game([(6, 6)] * 3)

    stats = leaderboard_service.compute_stats()

    assert stats.total_games == 1
    assert stats.total_score_all_time == 20
    assert stats.sum_distribution[12] == 0
    assert stats.pair_distribution[5][5] == 0
    assert stats.pair_distribution[0][0] == 10


def test_stats_average(play_game, leaderboard_service):
    play_game([(1, 1)] * 10, finish=True)
    play_game([(1, 2)] * 10, finish=True)

    stats = leaderboard_service.compute_stats()

    assert stats.total_games == 2
    assert stats.total_score_all_time == 50
    assert stats.average_score_per_game == 25
