"""Piece codes, move flags and game-info bit layouts shared by the engine."""

from enum import IntEnum

U64_MASK = (1 << 64) - 1


class Piece(IntEnum):
    """Index of each bitboard in a board's list of eight bitboards."""

    BLACK = 0
    WHITE = 1
    PAWNS = 2
    KNIGHTS = 3
    BISHOPS = 4
    ROOKS = 5
    QUEENS = 6
    KINGS = 7
    EMPTY = 8


# A move is 16 bits: bits 0-5 target square, bits 6-11 origin square,
# bits 12-15 flags.
#
# code  promotion capture special1 special0  kind of move
#  0        0        0       0        0      quiet move
#  1        0        0       0        1      double pawn push
#  2        0        0       1        0      king castle
#  3        0        0       1        1      queen castle
#  4        0        1       0        0      capture
#  5        0        1       0        1      en-passant capture
#  8        1        0       0        0      knight promotion
#  9        1        0       0        1      bishop promotion
# 10        1        0       1        0      rook promotion
# 11        1        0       1        1      queen promotion
FLAG_SPECIAL_0 = 1 << 12
FLAG_SPECIAL_1 = 1 << 13
FLAG_CAPTURE = 1 << 14
FLAG_PROMOTION = 1 << 15

FLAG_DOUBLE_PAWN_PUSH = FLAG_SPECIAL_0
FLAG_KING_CASTLE = FLAG_SPECIAL_1
FLAG_QUEEN_CASTLE = FLAG_SPECIAL_1 | FLAG_SPECIAL_0
FLAG_CAPTURE_MOVE = FLAG_CAPTURE
FLAG_EP_CAPTURE = FLAG_CAPTURE | FLAG_SPECIAL_0

FLAG_PROMO_KNIGHT = FLAG_PROMOTION
FLAG_PROMO_BISHOP = FLAG_PROMOTION | FLAG_SPECIAL_0
FLAG_PROMO_ROOK = FLAG_PROMOTION | FLAG_SPECIAL_1
FLAG_PROMO_QUEEN = FLAG_PROMOTION | FLAG_SPECIAL_1 | FLAG_SPECIAL_0

FLAGS_MASK = 0xF000

# Game-info word.
TURN_MASK = 0x1
WK_CASTLE = 0x2
WQ_CASTLE = 0x4
BK_CASTLE = 0x8
BQ_CASTLE = 0x10

MOVE_MASK = 0x7E0
MOVE_SHIFT = 5

EP_IS_SET = 1 << 11
EP_FILE_MASK = 0x7 << 12
EP_FILE_SHIFT = 12

# Squares a king passes over when castling; none may be attacked.
WK_CASTLE_MASK = (1 << 5) | (1 << 6)
WQ_CASTLE_MASK = (1 << 3) | (1 << 2)
BK_CASTLE_MASK = (1 << 61) | (1 << 62)
BQ_CASTLE_MASK = (1 << 59) | (1 << 58)


def move_from(move: int) -> int:
    """Origin square of an encoded move."""
    return (move >> 6) & 0x3F


def move_to(move: int) -> int:
    """Target square of an encoded move."""
    return move & 0x3F


def move_flags(move: int) -> int:
    """Flag bits (12-15) of an encoded move, left in place."""
    return move & FLAGS_MASK