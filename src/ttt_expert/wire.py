"""
Request/response encoding for hosting the engine behind a process boundary.

Request: 9 cell tokens (X, O, EMPTY) followed by the turn token.
    "X EMPTY EMPTY EMPTY O EMPTY EMPTY EMPTY EMPTY X"
The fact form "(board-state (cells X EMPTY ...) (turn O))" is also accepted.

Response: {"position": 0-8 or -1, "rule": <rule id>, "description": <text>}
"""

import json
import re
from typing import Dict, Tuple, Union

from .game import Board, InvalidBoardError, Mark, as_board, as_mark
from .rules import MoveResult, NoMoveAvailable, decide

_CELLS_RE = re.compile(r"\(cells\s+([^)]*)\)", re.IGNORECASE)
_TURN_RE = re.compile(r"\(turn\s+([^)\s]+)\s*\)", re.IGNORECASE)


def encode_request(board: Board, mark: Mark) -> str:
    """Serialize a decision request as one line of tokens."""
    board = as_board(board)
    mark = as_mark(mark)
    return " ".join([c.token for c in board] + [mark.token])


def _decode_fact(text: str) -> Tuple[Board, Mark]:
    cells = _CELLS_RE.search(text)
    turn = _TURN_RE.search(text)
    if cells is None or turn is None:
        raise InvalidBoardError(f"Malformed board-state fact: {text!r}")
    return as_board(cells.group(1).split()), as_mark(turn.group(1))


def decode_request(text: str) -> Tuple[Board, Mark]:
    """
    Parse a request line into (board, mark to move).

    Raises:
        InvalidBoardError: wrong token count or unknown token
    """
    text = text.strip()
    if text.startswith("("):
        return _decode_fact(text)
    tokens = text.split()
    if len(tokens) != 10:
        raise InvalidBoardError(
            f"Request must have 9 cell tokens and a turn token, got {len(tokens)} tokens"
        )
    return as_board(tokens[:9]), as_mark(tokens[9])


def encode_response(result: Union[MoveResult, NoMoveAvailable]) -> Dict[str, object]:
    """Response payload; position is -1 when no move is available."""
    position = result.position if isinstance(result, MoveResult) else -1
    return {
        "position": position,
        "rule": result.rule_id,
        "description": result.rule_description,
    }


def response_to_json(result: Union[MoveResult, NoMoveAvailable]) -> str:
    return json.dumps(encode_response(result))


def handle_request(text: str) -> str:
    """One request line in, one JSON response out."""
    board, mark = decode_request(text)
    return response_to_json(decide(board, mark))
