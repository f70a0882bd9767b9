import pytest

from ttt_expert import as_board


def parse(picture: str):
    """Board from a 9-char picture, '.' for empty: 'XX.OO....'."""
    return as_board(list(picture.replace(" ", "")))


@pytest.fixture
def board_from():
    return parse
