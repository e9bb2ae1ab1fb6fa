import pytest

from bitchess.constants import (
    FLAG_CAPTURE,
    FLAG_DOUBLE_PAWN_PUSH,
    FLAG_EP_CAPTURE,
    FLAG_KING_CASTLE,
    FLAG_PROMO_BISHOP,
    FLAG_PROMO_KNIGHT,
    FLAG_PROMO_QUEEN,
    FLAG_PROMO_ROOK,
    FLAG_QUEEN_CASTLE,
    Piece,
    move_flags,
    move_from,
    move_to,
)


@pytest.mark.parametrize("origin", range(64))
def test_move_squares_round_trip(origin):
    for target in range(64):
        move = (origin << 6) | target | FLAG_PROMO_QUEEN
        assert move_from(move) == origin
        assert move_to(move) == target


@pytest.mark.parametrize(
    "flag, code",
    [
        (FLAG_DOUBLE_PAWN_PUSH, 1),
        (FLAG_KING_CASTLE, 2),
        (FLAG_QUEEN_CASTLE, 3),
        (FLAG_CAPTURE, 4),
        (FLAG_EP_CAPTURE, 5),
        (FLAG_PROMO_KNIGHT, 8),
        (FLAG_PROMO_BISHOP, 9),
        (FLAG_PROMO_ROOK, 10),
        (FLAG_PROMO_QUEEN, 11),
    ],
)
def test_flag_codes_match_table(flag, code):
    move = flag | (12 << 6) | 28
    assert move_flags(move) >> 12 == code


def test_flags_leave_squares_out():
    assert move_flags((63 << 6) | 63) == 0


def test_piece_values_work_as_squares_in_moves():
    move = (Piece.WHITE << 6) | Piece.BLACK
    assert move_from(move) == 1
    assert move_to(move) == 0
    assert move_flags(move) == 0