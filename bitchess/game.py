"""Game wrapper: move history, undo, and end-of-game detection."""

from dataclasses import dataclass
from enum import Enum, auto
from itertools import pairwise

from .board import STARTING_FEN, Board, apply_move
from .constants import MOVE_MASK, Piece
from .movegenerator import MoveGenerator
from .movetables import get_tables


class GameState(Enum):
    ONGOING = auto()
    CHECKMATE = auto()
    STALEMATE = auto()
    DRAW_REPETITION = auto()
    DRAW_50_MOVE = auto()
    DRAW_INSUFFICIENT_MATERIAL = auto()


@dataclass(frozen=True)
class BoardState:
    """A saved position: the eight bitboards and the game-info word."""

    piece_bb: tuple
    game_info: int

    @classmethod
    def of(cls, board: Board) -> "BoardState":
        return cls(tuple(board.piece_bb), board.game_info)

    def occupancy(self) -> int:
        return self.piece_bb[Piece.WHITE] | self.piece_bb[Piece.BLACK]

    def position_key(self) -> tuple:
        """Identity of the position, ignoring the halfmove clock."""
        return self.piece_bb, self.game_info & ~MOVE_MASK


def _square_parity(bitboard: int) -> int:
    square = bitboard.bit_length() - 1
    rank, file = divmod(square, 8)
    return (rank + file) % 2


class Game:
    """A board plus the history needed to undo moves and detect draws."""

    def __init__(self, fen: str = STARTING_FEN):
        self.board = Board(fen)
        self.move_gen = MoveGenerator(get_tables())
        self._history: list[BoardState] = []
        self.state = GameState.ONGOING
        self.update_game_state()

    def do_move(self, move: int) -> None:
        """Play `move` on the game's board, remembering the position before it."""
        self._history.append(BoardState.of(self.board))
        self.board.game_info = apply_move(move, self.board.piece_bb, self.board.game_info, self.board)

    def undo_move(self) -> None:
        """Restore the position before the last played move; no-op if none."""
        if not self._history:
            return
        previous = self._history.pop()
        self.board.piece_bb = list(previous.piece_bb)
        self.board.game_info = previous.game_info

    def make_move(self, move: int) -> Board:
        """The board that `move` would lead to; the game is left untouched."""
        piece_bb = list(self.board.piece_bb)
        game_info = apply_move(move, piece_bb, self.board.game_info, self.board)
        return Board.from_bitboards(piece_bb, game_info)

    def update_game_state(self) -> GameState:
        legal = self.move_gen.generate_all_legal_moves(self.board)
        if not legal:
            self.state = GameState.CHECKMATE if self.board.is_in_check() else GameState.STALEMATE
        elif self.is_threefold_repetition():
            self.state = GameState.DRAW_INSUFFICIENT_MATERIAL
        elif self.is_fifty_move_rule():
            self.state = GameState.DRAW_50_MOVE
        elif self.is_insufficient_material():
            self.state = GameState.DRAW_INSUFFICIENT_MATERIAL
        else:
            self.state = GameState.ONGOING
        return self.state

    def _states(self) -> list[BoardState]:
        return [*self._history, BoardState.of(self.board)]

    def is_threefold_repetition(self) -> bool:
        """Whether the current position has occurred at least three times."""
        states = self._states()
        current = states[-1].position_key()
        return sum(state.position_key() == current for state in states) >= 3

    def is_fifty_move_rule(self) -> bool:
        """Whether the last 100 plies had no pawn move and no capture."""
        plies = 0
        for before, after in reversed(list(pairwise(self._states()))):
            if before.piece_bb[Piece.PAWNS] != after.piece_bb[Piece.PAWNS]:
                break
            if before.occupancy().bit_count() != after.occupancy().bit_count():
                break
            plies += 1
        return plies >= 100

    def is_insufficient_material(self) -> bool:
        """Whether neither side has material that could deliver mate."""
        bb = self.board.piece_bb
        if bb[Piece.PAWNS] | bb[Piece.ROOKS] | bb[Piece.QUEENS]:
            return False
        minors = bb[Piece.KNIGHTS] | bb[Piece.BISHOPS]
        if minors.bit_count() <= 1:
            return True
        if bb[Piece.KNIGHTS]:
            return False
        white = self.board.pieces(Piece.BISHOPS, Piece.WHITE)
        black = self.board.pieces(Piece.BISHOPS, Piece.BLACK)
        if white.bit_count() == 1 and black.bit_count() == 1:
            return _square_parity(white) == _square_parity(black)
        return False