"""Pseudo-legal and legal move generation over bitboards."""

from collections.abc import Iterator

from .constants import (
    BK_CASTLE,
    BK_CASTLE_MASK,
    BQ_CASTLE,
    BQ_CASTLE_MASK,
    FLAG_CAPTURE,
    FLAG_CAPTURE_MOVE,
    FLAG_DOUBLE_PAWN_PUSH,
    FLAG_EP_CAPTURE,
    FLAG_KING_CASTLE,
    FLAG_PROMO_BISHOP,
    FLAG_PROMO_KNIGHT,
    FLAG_PROMO_QUEEN,
    FLAG_PROMO_ROOK,
    FLAG_QUEEN_CASTLE,
    U64_MASK,
    WK_CASTLE,
    WK_CASTLE_MASK,
    WQ_CASTLE,
    WQ_CASTLE_MASK,
    Piece,
    move_flags,
    move_from,
    move_to,
)
from .movetables import MoveTables, get_tables

MAX_MOVES = 218

_PROMOTION_FLAGS = {
    Piece.KNIGHTS: FLAG_PROMO_KNIGHT,
    Piece.BISHOPS: FLAG_PROMO_BISHOP,
    Piece.ROOKS: FLAG_PROMO_ROOK,
    Piece.QUEENS: FLAG_PROMO_QUEEN,
}
# Promotions always choose a queen.
_PROMOTION_PIECE = Piece.QUEENS

_ROOK_DIRECTIONS = ((1, 0), (-1, 0), (0, 1), (0, -1))
_BISHOP_DIRECTIONS = ((1, 1), (1, -1), (-1, 1), (-1, -1))


def _bits(bitboard: int) -> Iterator[int]:
    """Set squares of a bitboard, lowest first."""
    while bitboard:
        low = bitboard & -bitboard
        yield low.bit_length() - 1
        bitboard ^= low


def _slide(occupancy: int, square: int, directions) -> int:
    attacks = 0
    start_row, start_col = divmod(square, 8)
    for d_row, d_col in directions:
        row, col = start_row + d_row, start_col + d_col
        while 0 <= row < 8 and 0 <= col < 8:
            bit = 1 << (row * 8 + col)
            attacks |= bit
            if occupancy & bit:
                break
            row += d_row
            col += d_col
    return attacks


def rook_attacks(occupancy: int, square: int) -> int:
    """Squares a rook on `square` reaches, stopping at the first blocker."""
    return _slide(occupancy, square, _ROOK_DIRECTIONS)


def bishop_attacks(occupancy: int, square: int) -> int:
    """Squares a bishop on `square` reaches, stopping at the first blocker."""
    return _slide(occupancy, square, _BISHOP_DIRECTIONS)


def _en_passant(board):
    square = board.en_passant_square()
    if square is None or square < 0:
        return None
    return square


class MoveListFullError(OverflowError):
    """Raised when a move list already holds the maximum number of moves."""


class MoveList:
    """An ordered list of encoded moves, bounded at MAX_MOVES."""

    __slots__ = ("_moves",)

    def __init__(self):
        self._moves: list[int] = []

    def add(self, move: int) -> None:
        if len(self._moves) >= MAX_MOVES:
            raise MoveListFullError(f"move list already holds {MAX_MOVES} moves")
        self._moves.append(move)

    def clear(self) -> None:
        self._moves.clear()

    def get_flags(self, index: int) -> int:
        """Flag bits of the move at `index`, or 0 when out of range."""
        if not 0 <= index < len(self._moves):
            return 0
        return move_flags(self._moves[index])

    def describe(self, index: int) -> str | None:
        """One-line description of the move at `index`, or None when out of range."""
        if not 0 <= index < len(self._moves):
            return None
        move = self._moves[index]
        return f"flags: {move >> 12}, from : {move_from(move)}, to : {move_to(move)}"

    def __len__(self) -> int:
        return len(self._moves)

    def __iter__(self) -> Iterator[int]:
        return iter(self._moves)

    def __getitem__(self, index: int) -> int:
        return self._moves[index]

    def __repr__(self) -> str:
        return f"MoveList({self._moves!r})"


class MoveGenerator:
    """Generates moves for a board using precomputed move tables."""

    def __init__(self, tables: MoveTables | None = None):
        self.tables = tables if tables is not None else get_tables()
        self._generators = {
            Piece.KINGS: self._king_moves,
            Piece.KNIGHTS: self._knight_moves,
            Piece.BISHOPS: self._bishop_moves,
            Piece.ROOKS: self._rook_moves,
            Piece.QUEENS: self._queen_moves,
            Piece.PAWNS: self._pawn_moves,
        }

    def generate_all_legal_moves(self, board) -> MoveList:
        """Pseudo-legal moves of the side to move, kept when the side to move
        after the move is not in check."""
        from .board import apply_move

        pseudo = MoveList()
        for square in _bits(board.friendly_pieces()):
            piece = board.piece_type(square)
            if piece != Piece.EMPTY:
                self.generate_moves(piece, board, square, pseudo)

        legal = MoveList()
        for move in pseudo:
            piece_bb = list(board.piece_bb)
            game_info = apply_move(move, piece_bb, board.game_info, board)
            after = type(board).from_bitboards(piece_bb, game_info)
            if not after.is_in_check(after.friendly_colour()):
                legal.add(move)
        return legal

    def generate_moves(self, piece_type, board, square: int, moves: MoveList) -> None:
        """Add the pseudo-legal moves of the piece on `square` to `moves`."""
        generator = self._generators.get(piece_type)
        if generator is not None:
            generator(board, square, moves)

    def _king_moves(self, board, square, moves):
        moves_bb = self.tables.king_bb[square]
        attacked = self.attacked_bb(board, board.enemy_colour())
        colour = board.friendly_colour()
        info = board.game_info

        if colour == Piece.WHITE and square == 4:
            if info & WK_CASTLE and not attacked & WK_CASTLE_MASK:
                moves_bb |= 1 << 6
            if info & WQ_CASTLE and not attacked & WQ_CASTLE_MASK:
                moves_bb |= 1 << 2
        elif colour == Piece.BLACK and square == 60:
            if info & BK_CASTLE and not attacked & BK_CASTLE_MASK:
                moves_bb |= 1 << 62
            if info & BQ_CASTLE and not attacked & BQ_CASTLE_MASK:
                moves_bb |= 1 << 58

        self.add_moves(moves, board, square, moves_bb)

    def _queen_moves(self, board, square, moves):
        occupancy = board.all_pieces()
        moves_bb = bishop_attacks(occupancy, square) | rook_attacks(occupancy, square)
        self.add_moves(moves, board, square, moves_bb)

    def _rook_moves(self, board, square, moves):
        self.add_moves(moves, board, square, rook_attacks(board.all_pieces(), square))

    def _bishop_moves(self, board, square, moves):
        self.add_moves(moves, board, square, bishop_attacks(board.all_pieces(), square))

    def _knight_moves(self, board, square, moves):
        self.add_moves(moves, board, square, self.tables.knight_bb[square])

    def _pawn_moves(self, board, square, moves):
        empty = ~board.all_pieces() & U64_MASK
        colour = board.friendly_colour()
        moves_bb = self.tables.pawn_moves_bb[colour][square] & empty
        row, col = divmod(square, 8)

        if colour == Piece.WHITE and row == 1 and not moves_bb & (1 << (square + 8)):
            moves_bb &= ~(1 << (square + 16))
        elif colour == Piece.BLACK and row == 6 and not moves_bb & (1 << (square - 8)):
            moves_bb &= ~(1 << (square - 16))

        moves_bb |= self.tables.pawn_captures_bb[colour][square] & board.piece_bb[board.enemy_colour()]

        ep_square = _en_passant(board)
        if ep_square is not None:
            ep_row, ep_col = divmod(ep_square, 8)
            if abs(col - ep_col) == 1:
                if colour == Piece.WHITE and row == 4 and ep_row == 5:
                    moves_bb |= 1 << ep_square
                if colour == Piece.BLACK and row == 3 and ep_row == 2:
                    moves_bb |= 1 << ep_square

        self.add_moves(moves, board, square, moves_bb)

    def attacked_bb(self, board, enemy_colour) -> int:
        """All squares attacked by the pieces of `enemy_colour`."""
        occupancy = board.all_pieces()
        attacked = 0
        for square in _bits(board.piece_bb[enemy_colour]):
            piece = board.piece_type(square)
            if piece == Piece.PAWNS:
                attacked |= self.tables.pawn_captures_bb[enemy_colour][square]
            elif piece == Piece.KNIGHTS:
                attacked |= self.tables.knight_bb[square]
            elif piece == Piece.BISHOPS:
                attacked |= bishop_attacks(occupancy, square)
            elif piece == Piece.ROOKS:
                attacked |= rook_attacks(occupancy, square)
            elif piece == Piece.QUEENS:
                attacked |= bishop_attacks(occupancy, square) | rook_attacks(occupancy, square)
            elif piece == Piece.KINGS:
                attacked |= self.tables.king_bb[square]
        return attacked

    def add_moves(self, moves: MoveList, board, square: int, moves_bb: int) -> None:
        """Encode every target in `moves_bb` not held by a friendly piece."""
        moves_bb &= ~board.piece_bb[board.friendly_colour()]
        for target in _bits(moves_bb & U64_MASK):
            moves.add(self.read_move(square, target, board))

    def read_move(self, from_square: int, to_square: int, board) -> int:
        """Encode a move from `from_square` to `to_square` with its flags."""
        move = (from_square << 6) | to_square
        piece = board.piece_type(from_square)
        target = board.piece_type(to_square)

        is_promotion = piece == Piece.PAWNS and (to_square >= 56 or to_square <= 7)
        is_capture = target != Piece.EMPTY
        is_en_passant = False
        if piece == Piece.PAWNS:
            ep_square = _en_passant(board)
            if ep_square is not None and to_square == ep_square and target == Piece.EMPTY:
                is_capture = True
                is_en_passant = True
        distance = abs(from_square - to_square)
        is_double_push = piece == Piece.PAWNS and distance == 16
        is_castle = piece == Piece.KINGS and distance == 2

        if is_promotion:
            move |= _PROMOTION_FLAGS[_PROMOTION_PIECE]
            if is_capture:
                move |= FLAG_CAPTURE
        elif is_capture:
            move |= FLAG_EP_CAPTURE if is_en_passant else FLAG_CAPTURE_MOVE
        elif is_double_push:
            move |= FLAG_DOUBLE_PAWN_PUSH
        elif is_castle:
            move |= FLAG_QUEEN_CASTLE if to_square in (2, 58) else FLAG_KING_CASTLE
        return move

    def format_bitboard(self, bitboard: int, square: int, symbol: str) -> str:
        """Text grid of a bitboard, rank 8 first, with `symbol` on `square`."""
        lines = []
        for row in range(7, -1, -1):
            cells = []
            for col in range(8):
                current = row * 8 + col
                if current == square:
                    cells.append(symbol)
                elif bitboard >> current & 1:
                    cells.append("x")
                else:
                    cells.append(".")
            lines.append("".join(f"{cell} " for cell in cells))
        return "\n".join(lines) + "\n"