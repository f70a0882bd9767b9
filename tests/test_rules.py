import pytest

import ttt_expert.rules as rules
from ttt_expert import (
    EMPTY_BOARD,
    NO_MOVE,
    RULE_IDS,
    RULES,
    InvalidBoardError,
    Mark,
    MoveResult,
    NoMoveAvailable,
    Rule,
    RuleEngineError,
    decide,
    explain,
    format_explanation,
    iter_all_legal_nonterminal_states,
)


def test_rule_order():
    assert RULE_IDS == (
        "win", "block", "fork", "block-fork", "center",
        "opposite-corner", "corner", "side", "fallback",
    )
    assert all(r.description for r in RULES)


def test_win_beats_block(board_from):
    result = decide(board_from("XX. OO. ..."), Mark.X)
    assert result == MoveResult(2, "win", RULES[0].description)


def test_lowest_winning_cell_is_chosen(board_from):
    # X wins at 2 (row) or 6 (column)
    result = decide(board_from("XX. X.. .OO"), Mark.X)
    assert result.position == 2
    assert result.rule_id == "win"


def test_block(board_from):
    # O holds 0 and 4, X has no win
    result = decide(board_from("OX. .O. ..."), Mark.X)
    assert result.position == 8
    assert result.rule_id == "block"


def test_decide_accepts_token_lists():
    cells = ["O", "X", "EMPTY", "EMPTY", "O", "EMPTY", "EMPTY", "EMPTY", "EMPTY"]
    assert decide(cells, "X").position == 8


def test_fork(board_from):
    result = decide(board_from("XO. .X. ..O"), Mark.X)
    assert result.position == 3
    assert result.rule_id == "fork"


def test_block_single_fork(board_from):
    # X at 0 and 5: only cell 2 gives X two threats
    result = decide(board_from("X.. .OX ..."), Mark.O)
    assert result.position == 2
    assert result.rule_id == "block-fork"


def test_block_fork_prefers_forcing_fork_cell(board_from):
    # X center and corner 8, O corner 0: corner 2 blocks and forces X to answer at 1
    result = decide(board_from("O.. .X. ..X"), Mark.O)
    assert result.position == 2
    assert result.rule_id == "block-fork"


def test_block_fork_plays_side_against_opposite_corners(board_from):
    # Corners 2 and 6 would force X into a fork; a side cell is required
    result = decide(board_from("X.. .O. ..X"), Mark.O)
    assert result.rule_id == "block-fork"
    assert result.position in (1, 3, 5, 7)
    assert result.position == 1

    result = decide(board_from("..X .O. X.."), Mark.O)
    assert result.position == 1


def test_center(board_from):
    assert decide(EMPTY_BOARD, Mark.X) == MoveResult(4, "center", RULES[4].description)
    result = decide(board_from("X.. ... ..."), Mark.O)
    assert result.position == 4
    assert result.rule_id == "center"


@pytest.mark.parametrize("picture,expected", [
    ("O.. .X. ...", 8),
    ("... .X. ..O", 0),
    ("..O .X. ...", 6),
    ("... .X. O..", 2),
])
def test_opposite_corner(board_from, picture, expected):
    result = decide(board_from(picture), Mark.X)
    assert result.position == expected
    assert result.rule_id == "opposite-corner"


def test_corner(board_from):
    result = decide(board_from(".O. .X. ..."), Mark.X)
    assert result.position == 0
    assert result.rule_id == "corner"


def test_side(board_from):
    # Corners and center taken, no threats, no line on the board
    result = decide(board_from("O.X XXO O.X"), Mark.O)
    assert result.position == 1
    assert result.rule_id == "side"


def test_existing_line_is_not_a_win(board_from):
    # X already owns the 0-4-8 diagonal; no empty cell completes a new line
    result = decide(board_from("X.O .X. O.X"), Mark.X)
    assert result.position == 1
    assert result.rule_id == "side"


def test_fallback_is_lowest_empty_cell(board_from):
    rule, position = explain(board_from("XO. .X. ..O"), Mark.X)[-1]
    assert rule.rule_id == "fallback"
    assert position == 2


def test_full_board_returns_no_move(board_from):
    result = decide(board_from("XOX XOO OXX"), Mark.O)
    assert result is NO_MOVE
    assert isinstance(result, NoMoveAvailable)
    assert not hasattr(result, "position")


@pytest.mark.parametrize("board,mark", [
    (["X"] * 8, "O"),
    (["Q"] + ["EMPTY"] * 8, "O"),
    (["EMPTY"] * 9, "EMPTY"),
    (["EMPTY"] * 9, "Z"),
])
def test_malformed_input_is_rejected(board, mark):
    with pytest.raises(InvalidBoardError):
        decide(board, mark)


def test_illegal_rule_choice_is_an_error(board_from, monkeypatch):
    bad = Rule("bad", "Picks an occupied cell", lambda board, me, opp: 0)
    monkeypatch.setattr(rules, "RULES", (bad,))
    with pytest.raises(RuleEngineError):
        decide(board_from("X.. ... ..."), Mark.O)


def test_explain_agrees_with_decide(board_from):
    board = board_from("O.. .X. ..X")
    report = explain(board, Mark.O)
    assert [rule.rule_id for rule, _ in report] == list(RULE_IDS)
    first = next((rule, pos) for rule, pos in report if pos is not None)
    result = decide(board, Mark.O)
    assert (first[0].rule_id, first[1]) == (result.rule_id, result.position)


def test_deterministic_and_legal_on_every_state():
    for board, player in iter_all_legal_nonterminal_states():
        first = decide(board, player)
        second = decide(list(board), player)
        assert first == second
        assert isinstance(first, MoveResult)
        assert board[first.position] == Mark.EMPTY


def test_format_explanation_marks_the_fired_rule(board_from):
    text = format_explanation(board_from("O.. .X. ..X"), Mark.O)
    rows = text.splitlines()
    assert len(rows) == len(RULES)
    assert rows[0].split() == ["win", "-"]
    assert rows[3].split() == ["*", "block-fork", "2"]
    assert rows[6].split() == ["corner", "2"]
    assert sum(row.startswith("*") for row in rows) == 1
