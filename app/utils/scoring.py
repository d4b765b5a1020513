from collections.abc import Iterable


def count_set_points(sets: Iterable[tuple[int, int]]) -> tuple[int, int]:
    """Count sets won by (player1, player2).

    A set goes to whichever score is strictly greater. Tied sets are rejected
    before they get here, see ``app.schemas.match.MatchScores``.
    """
    player1_sets = 0
    player2_sets = 0
    for player1_games, player2_games in sets:
        if player1_games > player2_games:
            player1_sets += 1
        elif player2_games > player1_games:
            player2_sets += 1
        else:
            msg = f"Set cannot end in a tie ({player1_games}-{player2_games})"
            raise ValueError(msg)
    return player1_sets, player2_sets


def decide_winner(sets: Iterable[tuple[int, int]]) -> int:
    """Return 1 or 2 for the player with strictly more sets won."""
    player1_sets, player2_sets = count_set_points(sets)
    if player1_sets == player2_sets:
        msg = f"Sets are level at {player1_sets}-{player2_sets}, a deciding set is required"
        raise ValueError(msg)
    return 1 if player1_sets > player2_sets else 2
