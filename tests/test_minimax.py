import torch

from ttt_expert import EMPTY_BOARD, Mark, is_terminal, minimax_value_and_moves, optimal_policy
from ttt_expert.minimax import cache_size, clear_cache, iter_all_legal_nonterminal_states


def test_empty_board_is_a_draw():
    value, moves = minimax_value_and_moves(EMPTY_BOARD, Mark.X)
    assert value == 0
    assert sorted(moves) == list(range(9))


def test_immediate_win_is_found(board_from):
    value, moves = minimax_value_and_moves(board_from("XX. OO. ..."), Mark.X)
    assert value == 1
    assert 2 in moves


def test_won_and_lost_positions(board_from):
    # O completes the bottom row first
    value, moves = minimax_value_and_moves(board_from("XX. X.. .OO"), Mark.O)
    assert value == 1
    assert moves == [6]
    # X threatens 2 and 6, O cannot stop both
    value, _ = minimax_value_and_moves(board_from("XX. XO. ..O"), Mark.O)
    assert value == -1


def test_optimal_policy_is_uniform_over_best_moves(board_from):
    pi, v = optimal_policy(board_from("XX. OO. ..."), Mark.O)
    assert torch.isclose(pi.sum(), torch.tensor(1.0))
    assert pi[5] > 0
    assert v.item() == 1.0


def test_cache():
    clear_cache()
    assert cache_size() == 0
    minimax_value_and_moves(EMPTY_BOARD, Mark.X)
    assert cache_size() > 0


def test_iter_states_are_legal_and_open():
    states = list(iter_all_legal_nonterminal_states())
    assert len(states) > 4000
    assert (EMPTY_BOARD, Mark.X) in states
    for board, player in states[:500]:
        assert not is_terminal(board)[0]
        x_cnt = board.count(Mark.X)
        o_cnt = board.count(Mark.O)
        assert player == (Mark.X if x_cnt == o_cnt else Mark.O)


def test_finished_board_has_no_moves(board_from):
    value, moves = minimax_value_and_moves(board_from("XXX OO. ..."), Mark.O)
    assert value == -1
    assert moves == []
    pi, v = optimal_policy(board_from("XOX XOO OXX"), Mark.X)
    assert pi.sum().item() == 0.0
    assert v.item() == 0.0
