"""Precomputed attack and move bitboards for kings, knights and pawns."""

from functools import lru_cache

from .constants import Piece

_KING_OFFSETS = ((1, 0), (-1, 0), (0, 1), (0, -1), (1, 1), (1, -1), (-1, -1), (-1, 1))
_KNIGHT_OFFSETS = ((2, 1), (2, -1), (-2, 1), (-2, -1), (1, 2), (1, -2), (-1, 2), (-1, -2))


def _offset_bitboard(square: int, offsets) -> int:
    row, col = divmod(square, 8)
    bitboard = 0
    for d_row, d_col in offsets:
        new_row, new_col = row + d_row, col + d_col
        if 0 <= new_row < 8 and 0 <= new_col < 8:
            bitboard |= 1 << (new_row * 8 + new_col)
    return bitboard


def _pawn_pushes(square: int) -> tuple[int, int]:
    row, col = divmod(square, 8)
    white = black = 0
    if row + 1 < 8:
        white |= 1 << ((row + 1) * 8 + col)
    if row == 1:
        white |= 1 << ((row + 2) * 8 + col)
    if row - 1 >= 0:
        black |= 1 << ((row - 1) * 8 + col)
    if row == 6:
        black |= 1 << ((row - 2) * 8 + col)
    return white, black


def _pawn_captures(square: int) -> tuple[int, int]:
    row, col = divmod(square, 8)
    white = black = 0
    if row + 1 < 8:
        if col + 1 < 8:
            white |= 1 << ((row + 1) * 8 + col + 1)
        if col - 1 >= 0:
            white |= 1 << ((row + 1) * 8 + col - 1)
    if row - 1 >= 0:
        if col - 1 >= 0:
            black |= 1 << ((row - 1) * 8 + col - 1)
        if col + 1 < 8:
            black |= 1 << ((row - 1) * 8 + col + 1)
    return white, black


class MoveTables:
    """Per-square move bitboards; pawn tables are indexed by colour first."""

    def __init__(self):
        squares = range(64)
        self.king_bb = tuple(_offset_bitboard(sq, _KING_OFFSETS) for sq in squares)
        self.knight_bb = tuple(_offset_bitboard(sq, _KNIGHT_OFFSETS) for sq in squares)

        pushes = [_pawn_pushes(sq) for sq in squares]
        captures = [_pawn_captures(sq) for sq in squares]
        by_colour = {Piece.WHITE: 0, Piece.BLACK: 1}
        self.pawn_moves_bb = tuple(
            tuple(p[by_colour[colour]] for p in pushes)
            for colour in (Piece.BLACK, Piece.WHITE)
        )
        self.pawn_captures_bb = tuple(
            tuple(c[by_colour[colour]] for c in captures)
            for colour in (Piece.BLACK, Piece.WHITE)
        )


@lru_cache(maxsize=None)
def get_tables() -> MoveTables:
    """The shared table instance, built on first use."""
    return MoveTables()