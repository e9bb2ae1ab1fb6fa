import pytest

from bitchess.constants import (
    BK_CASTLE,
    EP_FILE_MASK,
    EP_FILE_SHIFT,
    EP_IS_SET,
    FLAG_CAPTURE,
    FLAG_CAPTURE_MOVE,
    FLAG_DOUBLE_PAWN_PUSH,
    FLAG_EP_CAPTURE,
    FLAG_KING_CASTLE,
    FLAG_PROMO_QUEEN,
    FLAG_QUEEN_CASTLE,
    TURN_MASK,
    WK_CASTLE,
    WQ_CASTLE,
    Piece,
    move_flags,
    move_from,
    move_to,
)
from bitchess.movegenerator import (
    MAX_MOVES,
    MoveGenerator,
    MoveList,
    MoveListFullError,
    bishop_attacks,
    rook_attacks,
)
from bitchess.movetables import get_tables

W, B = Piece.WHITE, Piece.BLACK


class _FakeBoard:
    def __init__(self, pieces, white_to_move=True, extra_info=0):
        self.piece_bb = [0] * 8
        for square, (colour, piece) in pieces.items():
            self.piece_bb[colour] |= 1 << square
            self.piece_bb[piece] |= 1 << square
        self.game_info = (TURN_MASK if white_to_move else 0) | extra_info

    def friendly_colour(self):
        return W if self.game_info & TURN_MASK else B

    def enemy_colour(self):
        return B if self.game_info & TURN_MASK else W

    def all_pieces(self):
        return self.piece_bb[W] | self.piece_bb[B]

    def friendly_pieces(self):
        return self.piece_bb[self.friendly_colour()]

    def piece_type(self, square):
        for piece in (Piece.PAWNS, Piece.BISHOPS, Piece.KNIGHTS, Piece.ROOKS, Piece.QUEENS, Piece.KINGS):
            if self.piece_bb[piece] >> square & 1:
                return piece
        return Piece.EMPTY

    def en_passant_square(self):
        if not self.game_info & EP_IS_SET:
            return None
        file = (self.game_info & EP_FILE_MASK) >> EP_FILE_SHIFT
        row = 5 if self.game_info & TURN_MASK else 2
        return row * 8 + file


def _squares(bitboard):
    return {sq for sq in range(64) if bitboard >> sq & 1}


@pytest.fixture
def gen():
    return MoveGenerator(get_tables())


def _moves_for(gen, board, square):
    moves = MoveList()
    gen.generate_moves(board.piece_type(square), board, square, moves)
    return list(moves)


# --- MoveList ---------------------------------------------------------

def test_move_list_add_iterate_index():
    moves = MoveList()
    moves.add(5)
    moves.add(9)
    assert len(moves) == 2
    assert list(moves) == [5, 9]
    assert moves[1] == 9


def test_move_list_clear():
    moves = MoveList()
    moves.add(1)
    moves.clear()
    assert len(moves) == 0


def test_move_list_flags_and_out_of_range():
    moves = MoveList()
    moves.add(FLAG_EP_CAPTURE | (36 << 6) | 43)
    assert moves.get_flags(0) == FLAG_EP_CAPTURE
    assert moves.get_flags(1) == 0
    assert moves.get_flags(-1) == 0


def test_move_list_describe():
    moves = MoveList()
    moves.add((12 << 6) | 28)
    assert moves.describe(0) == "flags: 0, from : 12, to : 28"
    assert moves.describe(3) is None


def test_move_list_full():
    moves = MoveList()
    for i in range(MAX_MOVES):
        moves.add(i)
    with pytest.raises(MoveListFullError):
        moves.add(0)
    assert len(moves) == MAX_MOVES


# --- sliding attacks --------------------------------------------------

@pytest.mark.parametrize("square", range(64))
def test_rook_attacks_empty_board(square):
    attacks = _squares(rook_attacks(0, square))
    assert len(attacks) == 14
    assert all(t % 8 == square % 8 or t // 8 == square // 8 for t in attacks)


def test_bishop_attacks_symmetric_on_empty_board():
    for a in range(64):
        for b in _squares(bishop_attacks(0, a)):
            assert a in _squares(bishop_attacks(0, b))
            assert abs(a % 8 - b % 8) == abs(a // 8 - b // 8)


def test_rook_stops_at_blocker():
    attacks = _squares(rook_attacks(1 << 8, 0))
    assert 8 in attacks
    assert 16 not in attacks


def test_bishop_stops_at_blocker():
    attacks = _squares(bishop_attacks(1 << 18, 0))
    assert 9 in attacks and 18 in attacks
    assert 27 not in attacks


# --- read_move --------------------------------------------------------

def test_double_pawn_push_flag(gen):
    board = _FakeBoard({12: (W, Piece.PAWNS)})
    move = gen.read_move(12, 28, board)
    assert move_flags(move) == FLAG_DOUBLE_PAWN_PUSH
    assert (move_from(move), move_to(move)) == (12, 28)


def test_capture_flag(gen):
    board = _FakeBoard({12: (W, Piece.PAWNS), 21: (B, Piece.KNIGHTS)})
    assert move_flags(gen.read_move(12, 21, board)) == FLAG_CAPTURE_MOVE


def test_promotion_flags(gen):
    board = _FakeBoard({48: (W, Piece.PAWNS), 57: (B, Piece.ROOKS)})
    assert move_flags(gen.read_move(48, 56, board)) == FLAG_PROMO_QUEEN
    assert move_flags(gen.read_move(48, 57, board)) == FLAG_PROMO_QUEEN | FLAG_CAPTURE


def test_castle_flags(gen):
    board = _FakeBoard({4: (W, Piece.KINGS)})
    assert move_flags(gen.read_move(4, 6, board)) == FLAG_KING_CASTLE
    assert move_flags(gen.read_move(4, 2, board)) == FLAG_QUEEN_CASTLE


def test_en_passant_flag(gen):
    info = EP_IS_SET | (3 << EP_FILE_SHIFT)
    board = _FakeBoard({36: (W, Piece.PAWNS), 35: (B, Piece.PAWNS)}, extra_info=info)
    assert move_flags(gen.read_move(36, 43, board)) == FLAG_EP_CAPTURE


# --- generation -------------------------------------------------------

def test_pawn_from_start_has_single_and_double_push(gen):
    board = _FakeBoard({12: (W, Piece.PAWNS)})
    targets = {move_to(m) for m in _moves_for(gen, board, 12)}
    assert targets == {20, 28}


def test_blocked_pawn_has_no_moves(gen):
    board = _FakeBoard({12: (W, Piece.PAWNS), 20: (B, Piece.PAWNS)})
    assert _moves_for(gen, board, 12) == []


def test_black_pawn_moves_down(gen):
    board = _FakeBoard({52: (B, Piece.PAWNS)}, white_to_move=False)
    targets = {move_to(m) for m in _moves_for(gen, board, 52)}
    assert targets == {44, 36}


def test_en_passant_generated(gen):
    info = EP_IS_SET | (3 << EP_FILE_SHIFT)
    board = _FakeBoard({36: (W, Piece.PAWNS), 35: (B, Piece.PAWNS)}, extra_info=info)
    moves = _moves_for(gen, board, 36)
    assert any(move_to(m) == 43 and move_flags(m) == FLAG_EP_CAPTURE for m in moves)


def test_knight_moves_match_table(gen):
    board = _FakeBoard({1: (W, Piece.KNIGHTS)})
    targets = {move_to(m) for m in _moves_for(gen, board, 1)}
    assert targets == _squares(get_tables().knight_bb[1])


def test_add_moves_skips_friendly_squares(gen):
    board = _FakeBoard({0: (W, Piece.ROOKS), 1: (W, Piece.KNIGHTS), 8: (B, Piece.PAWNS)})
    moves = MoveList()
    gen.add_moves(moves, board, 0, (1 << 1) | (1 << 8))
    assert [move_to(m) for m in moves] == [8]
    assert move_flags(moves[0]) == FLAG_CAPTURE_MOVE


def test_castling_generated_when_allowed(gen):
    board = _FakeBoard(
        {4: (W, Piece.KINGS), 0: (W, Piece.ROOKS), 7: (W, Piece.ROOKS)},
        extra_info=WK_CASTLE | WQ_CASTLE,
    )
    moves = {move_to(m): move_flags(m) for m in _moves_for(gen, board, 4)}
    assert moves[6] == FLAG_KING_CASTLE
    assert moves[2] == FLAG_QUEEN_CASTLE


def test_castling_refused_through_attacked_square(gen):
    board = _FakeBoard(
        {4: (W, Piece.KINGS), 0: (W, Piece.ROOKS), 7: (W, Piece.ROOKS), 61: (B, Piece.ROOKS)},
        extra_info=WK_CASTLE | WQ_CASTLE,
    )
    targets = {move_to(m) for m in _moves_for(gen, board, 4)}
    assert 6 not in targets
    assert 2 in targets


def test_black_castle_needs_right(gen):
    board = _FakeBoard({60: (B, Piece.KINGS)}, white_to_move=False, extra_info=BK_CASTLE)
    targets = {move_to(m) for m in _moves_for(gen, board, 60)}
    assert 62 in targets
    assert 58 not in targets


def test_attacked_bb_of_lone_rook(gen):
    board = _FakeBoard({63: (B, Piece.ROOKS), 4: (W, Piece.KINGS)})
    assert gen.attacked_bb(board, B) == rook_attacks(board.all_pieces(), 63)


def test_attacked_bb_pawn_uses_capture_table(gen):
    board = _FakeBoard({52: (B, Piece.PAWNS)})
    assert gen.attacked_bb(board, B) == get_tables().pawn_captures_bb[B][52]


def test_format_bitboard_layout(gen):
    text = gen.format_bitboard((1 << 0) | (1 << 63), 7, "R")
    lines = text.splitlines()
    assert len(lines) == 8
    assert lines[0].split() == ["."] * 7 + ["x"]
    assert lines[7].split() == ["x"] + ["."] * 6 + ["R"]


def test_legal_moves_from_start_position(gen):
    from bitchess.board import Board

    board = Board("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1")
    moves = list(gen.generate_all_legal_moves(board))
    assert len(moves) == 20
    assert len(set(moves)) == len(moves)
    assert all(move_from(m) < 16 for m in moves)