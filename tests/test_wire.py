import json

import pytest

from ttt_expert import (
    EMPTY_BOARD,
    NO_MOVE,
    InvalidBoardError,
    Mark,
    MoveResult,
    decode_request,
    encode_request,
    encode_response,
    handle_request,
    response_to_json,
)


def test_encode_request(board_from):
    line = encode_request(board_from("X.. .O. ..."), Mark.O)
    assert line == "X EMPTY EMPTY EMPTY O EMPTY EMPTY EMPTY EMPTY O"


def test_decode_request_round_trip(board_from):
    board = board_from("X.. .O. ..X")
    assert decode_request(encode_request(board, Mark.O)) == (board, Mark.O)


def test_decode_board_state_fact():
    text = "(board-state (cells X EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY ) (turn O) (game-over FALSE) (winner NONE))"
    board, mark = decode_request(text)
    assert board[0] is Mark.X
    assert board[1:] == EMPTY_BOARD[1:]
    assert mark is Mark.O


@pytest.mark.parametrize("text", [
    "",
    "X O X",
    "X EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY",
    "X EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY BOGUS O",
    "X EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY",
    "(board-state (cells X EMPTY))",
])
def test_decode_rejects_malformed(text):
    with pytest.raises(InvalidBoardError):
        decode_request(text)


def test_encode_response():
    result = MoveResult(4, "center", "Take the center")
    assert encode_response(result) == {"position": 4, "rule": "center", "description": "Take the center"}
    assert encode_response(NO_MOVE)["position"] == -1
    assert json.loads(response_to_json(NO_MOVE))["rule"] == "no-move"


def test_handle_request():
    reply = json.loads(handle_request("X EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY O"))
    assert reply["position"] == 4
    assert reply["rule"] == "center"

    reply = json.loads(handle_request("X O X X O O O X X O"))
    assert reply["position"] == -1
