"""Bitboard position: FEN loading, move application and text rendering."""

from .constants import (
    BK_CASTLE,
    BQ_CASTLE,
    EP_FILE_MASK,
    EP_FILE_SHIFT,
    EP_IS_SET,
    FLAG_CAPTURE,
    FLAG_EP_CAPTURE,
    FLAG_KING_CASTLE,
    FLAG_PROMOTION,
    MOVE_MASK,
    MOVE_SHIFT,
    TURN_MASK,
    WK_CASTLE,
    WQ_CASTLE,
    Piece,
    move_from,
    move_to,
)
from .movegenerator import MoveGenerator
from .movetables import get_tables

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_U16_MASK = 0xFFFF
_EP_BITS = EP_IS_SET | EP_FILE_MASK

_PIECE_LETTERS = {
    "P": Piece.PAWNS,
    "N": Piece.KNIGHTS,
    "B": Piece.BISHOPS,
    "R": Piece.ROOKS,
    "Q": Piece.QUEENS,
    "K": Piece.KINGS,
}
# Lookup order used when turning a square into a character.
_CHAR_ORDER = (
    (Piece.PAWNS, "P"),
    (Piece.BISHOPS, "B"),
    (Piece.KNIGHTS, "N"),
    (Piece.ROOKS, "R"),
    (Piece.QUEENS, "Q"),
    (Piece.KINGS, "K"),
)
_TYPE_ORDER = (
    Piece.PAWNS,
    Piece.BISHOPS,
    Piece.KNIGHTS,
    Piece.ROOKS,
    Piece.QUEENS,
    Piece.KINGS,
)
_CASTLING_LETTERS = {"K": WK_CASTLE, "Q": WQ_CASTLE, "k": BK_CASTLE, "q": BQ_CASTLE}

# (colour, king target) -> (rook origin, rook target)
_CASTLE_ROOKS = {
    (Piece.WHITE, 2): (0, 3),
    (Piece.WHITE, 6): (7, 5),
    (Piece.BLACK, 58): (56, 59),
    (Piece.BLACK, 62): (63, 61),
}
# Rook origin squares and the castling right lost when that rook moves.
_ROOK_CORNERS = {
    Piece.WHITE: {0: WQ_CASTLE, 7: WK_CASTLE},
    Piece.BLACK: {56: BQ_CASTLE, 63: BK_CASTLE},
}


def _other(colour):
    return Piece.BLACK if colour == Piece.WHITE else Piece.WHITE


def apply_move(move: int, piece_bb: list, game_info: int, board: "Board") -> int:
    """Apply `move` to `piece_bb` in place, reading piece kinds from `board`.

    Returns the updated game-info word.
    """
    origin = move_from(move)
    target = move_to(move)

    piece = board.piece_type(origin)
    colour = board.colour_type(origin)
    if piece == Piece.EMPTY:
        raise ValueError(f"no piece kind on square {origin}")
    enemy = _other(colour)

    origin_bit = 1 << origin
    target_bit = 1 << target
    piece_bb[piece] &= ~origin_bit
    piece_bb[colour] &= ~origin_bit

    if move & FLAG_CAPTURE:
        if move & FLAG_EP_CAPTURE:
            captured = target - 8 if colour == Piece.WHITE else target + 8
            if 0 <= captured < 64:
                keep = ~(1 << captured)
                piece_bb[Piece.PAWNS] &= keep
                piece_bb[enemy] &= keep
        else:
            captured_piece = board.piece_type(target)
            captured_colour = board.colour_type(target)
            if captured_piece != Piece.EMPTY:
                piece_bb[captured_piece] &= ~target_bit
            piece_bb[captured_colour] &= ~target_bit
            game_info &= ~MOVE_MASK

    if move & FLAG_PROMOTION:
        promoted = Piece.KNIGHTS + ((move >> 13) & 0x3)
        piece_bb[promoted] |= target_bit
        piece_bb[colour] |= target_bit
        game_info &= ~MOVE_MASK
    else:
        piece_bb[piece] |= target_bit
        piece_bb[colour] |= target_bit
        if piece == Piece.PAWNS:
            game_info &= ~_EP_BITS
            if abs(origin - target) == 16:
                file = target % 8
                game_info |= EP_IS_SET | ((file << EP_FILE_SHIFT) & EP_FILE_MASK)
            game_info &= ~MOVE_MASK
        else:
            clock = ((game_info & MOVE_MASK) >> 6) + 1
            game_info = (game_info & ~MOVE_MASK) | ((clock << 6) & MOVE_MASK)

    if piece == Piece.KINGS:
        if colour == Piece.WHITE:
            game_info &= ~(WK_CASTLE | WQ_CASTLE)
        else:
            game_info &= ~(BK_CASTLE | BQ_CASTLE)
    elif piece == Piece.ROOKS:
        lost = _ROOK_CORNERS[colour].get(origin)
        if lost is not None:
            game_info &= ~lost

    if move & FLAG_KING_CASTLE:
        rook = _CASTLE_ROOKS.get((colour, target))
        if rook is not None:
            rook_from, rook_to = rook
            for index in (Piece.ROOKS, colour):
                piece_bb[index] &= ~(1 << rook_from)
                piece_bb[index] |= 1 << rook_to

    return (game_info ^ TURN_MASK) & _U16_MASK


class Board:
    """Eight bitboards (colours, then piece kinds) and a 16-bit game-info word."""

    def __init__(self, fen: str = STARTING_FEN):
        self.piece_bb = [0] * 8
        self.game_info = 0

        fields = fen.split()
        fields += [""] * (6 - len(fields))
        placement, turn, castling, en_passant, halfmove = fields[:5]

        square = 56
        for char in placement:
            if char == "/":
                square -= 16
            elif char.isdigit():
                square += int(char)
            else:
                self._load_piece(char, square)
                square += 1

        if turn == "w":
            self.game_info |= TURN_MASK
        elif turn == "b":
            self.game_info &= ~TURN_MASK

        for char in castling:
            self.game_info |= _CASTLING_LETTERS.get(char, 0)

        if halfmove:
            count = int(halfmove)
            self.game_info &= ~MOVE_MASK
            self.game_info |= (count << 6) & MOVE_MASK

        self.game_info &= ~_EP_BITS
        if en_passant and en_passant != "-":
            file = ord(en_passant[0]) - ord("a")
            self.game_info |= EP_IS_SET | ((file << EP_FILE_SHIFT) & EP_FILE_MASK)
        self.game_info &= _U16_MASK

    def _load_piece(self, char: str, square: int) -> None:
        if not 0 <= square < 64:
            raise ValueError(f"piece placement runs off the board at {char!r}")
        bit = 1 << square
        colour = Piece.WHITE if char == char.upper() else Piece.BLACK
        self.piece_bb[colour] |= bit
        kind = _PIECE_LETTERS.get(char.upper())
        if kind is not None:
            self.piece_bb[kind] |= bit

    @classmethod
    def from_bitboards(cls, piece_bb, game_info: int) -> "Board":
        """Build a board straight from eight bitboards and a game-info word."""
        board = cls.__new__(cls)
        board.piece_bb = list(piece_bb)
        board.game_info = game_info & _U16_MASK
        return board

    def copy(self) -> "Board":
        return type(self).from_bitboards(self.piece_bb, self.game_info)

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return self.piece_bb == other.piece_bb and self.game_info == other.game_info

    __hash__ = None

    def __repr__(self) -> str:
        return f"Board.from_bitboards({self.piece_bb!r}, {self.game_info:#06x})"

    def en_passant_square(self) -> int | None:
        """Square a pawn may capture onto en passant, or None."""
        if not self.game_info & EP_IS_SET:
            return None
        file = (self.game_info & EP_FILE_MASK) >> EP_FILE_SHIFT
        rank = 5 if self.friendly_colour() == Piece.WHITE else 2
        return rank * 8 + file

    def all_pieces(self) -> int:
        return self.piece_bb[Piece.WHITE] | self.piece_bb[Piece.BLACK]

    def friendly_pieces(self) -> int:
        return self.piece_bb[self.friendly_colour()]

    def enemy_pieces(self) -> int:
        return self.piece_bb[self.enemy_colour()]

    def pieces(self, piece, colour) -> int:
        """Bitboard of the pieces of one kind and colour."""
        return self.piece_bb[piece] & self.piece_bb[colour]

    def friendly_colour(self) -> Piece:
        return Piece.WHITE if self.game_info & TURN_MASK else Piece.BLACK

    def enemy_colour(self) -> Piece:
        return Piece.BLACK if self.game_info & TURN_MASK else Piece.WHITE

    def piece_type(self, square: int) -> Piece:
        for kind in _TYPE_ORDER:
            if self.piece_bb[kind] >> square & 1:
                return kind
        return Piece.EMPTY

    def colour_type(self, square: int) -> Piece:
        if self.piece_bb[Piece.WHITE] >> square & 1:
            return Piece.WHITE
        if self.piece_bb[Piece.BLACK] >> square & 1:
            return Piece.BLACK
        raise ValueError("received empty square")

    def piece_to_char(self, square: int) -> str:
        for kind, letter in _CHAR_ORDER:
            if self.pieces(kind, Piece.WHITE) >> square & 1:
                return letter
            if self.pieces(kind, Piece.BLACK) >> square & 1:
                return letter.lower()
        return "."

    def is_in_check(self, colour=None) -> bool:
        """Whether the king of `colour` (default: side to move) is attacked."""
        if colour is None:
            colour = self.friendly_colour()
        colour = Piece.WHITE if colour == Piece.WHITE else Piece.BLACK
        king = self.pieces(Piece.KINGS, colour)
        if not king:
            return False
        attacked = MoveGenerator(get_tables()).attacked_bb(self, _other(colour))
        return bool(king & attacked)

    def render(self) -> str:
        """The board, rank 8 first, followed by the game information."""
        rows = []
        for rank in range(7, -1, -1):
            rows.append("".join(f"{self.piece_to_char(rank * 8 + file)} " for file in range(8)))
        return "\n".join(rows) + "\n" + self.game_info_text() + "-" * 24 + "\n"

    def game_info_text(self) -> str:
        info = self.game_info
        turn = "White" if info & TURN_MASK else "Black"
        rights = "".join(letter for letter, bit in _CASTLING_LETTERS.items() if info & bit) or "-"
        clock = (info & MOVE_MASK) >> MOVE_SHIFT
        if info & EP_IS_SET:
            file = (info & EP_FILE_MASK) >> EP_FILE_SHIFT
            rank = 6 if info & TURN_MASK else 3
            en_passant = f"{chr(ord('a') + file)}{rank}"
        else:
            en_passant = "-"
        return (
            f"Turn: {turn}\n"
            f"Castling rights: {rights}\n"
            f"Halfmove clock: {clock}\n"
            f"En passant: {en_passant}\n"
        )

    def turn_text(self) -> str:
        return "White's turn" if self.game_info & TURN_MASK else "Black's turn"