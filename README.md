# bitchess

A small chess move generator built on 64-bit bitboards, written in pure
Python with no runtime dependencies. It can:

- load a position from a FEN string into a `Board`
- generate every legal move for the side to move (`MoveGenerator`)
- apply moves to a board, and play or undo them through a `Game`
- tell checkmate and stalemate apart, and spot some draws (`GameState`)
- count reachable positions with `perft`
- search for magic multipliers for rook and bishop attack lookup
  (`bitchess.magics`)

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Squares and moves

Squares are numbered 0 (a1) to 63 (h8), rank by rank. A move is a 16-bit
integer: bits 0–5 hold the destination square, bits 6–11 the origin square and
bits 12–15 the flags. `bitchess.constants` defines the flags
(`FLAG_DOUBLE_PAWN_PUSH`, `FLAG_KING_CASTLE`, `FLAG_QUEEN_CASTLE`,
`FLAG_CAPTURE`, `FLAG_EP_CAPTURE`, `FLAG_PROMOTION`, `FLAG_PROMO_QUEEN`, …), the
`Piece` enum that indexes a board's eight bitboards (two colours, then six
piece kinds), and the helpers `move_from`, `move_to` and `move_flags`.

## Usage

```python
from bitchess.board import Board
from bitchess.constants import move_flags, move_from, move_to
from bitchess.movegenerator import MoveGenerator
from bitchess.movetables import get_tables

board = Board("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1")
generator = MoveGenerator(get_tables())
moves = generator.generate_all_legal_moves(board)
for move in moves:
    print(move_from(move), move_to(move), move_flags(move))

print(board.render())
```

`generate_all_legal_moves` returns a `MoveList`, which supports `len`,
iteration and indexing, plus `get_flags(index)` and `describe(index)`. A move
list holds at most 218 moves; adding more raises `MoveListFullError`.

`Board()` with no argument is the starting position. Other useful members:
`piece_type(square)`, `colour_type(square)` (raises `ValueError` on an empty
square), `piece_to_char(square)`, `pieces(piece, colour)`,
`en_passant_square()` (a square or `None`), `is_in_check(colour=None)`,
`copy()`, `Board.from_bitboards(piece_bb, game_info)`, and the text helpers
`render()`, `game_info_text()` and `turn_text()`.

`bitchess.board.apply_move(move, piece_bb, game_info, board)` updates a list of
eight bitboards in place and returns the new game-info word.

`bitchess.movegenerator` also exposes `rook_attacks(occupancy, square)` and
`bishop_attacks(occupancy, square)`, and `MoveGenerator.format_bitboard` draws a
bitboard as a text grid.

### Playing a game

```python
from bitchess.game import Game, GameState

game = Game("rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 0 3")
print(game.state is GameState.CHECKMATE)   # True
```

`Game.do_move` changes the board in place and remembers the previous position,
so `Game.undo_move` can take it back (it does nothing when there is no
history). `Game.make_move` returns a new `Board` and leaves the game untouched.
`Game.update_game_state` recomputes and returns `game.state`; it also uses
`is_threefold_repetition`, `is_fifty_move_rule` and `is_insufficient_material`.
A threefold repetition is reported as `GameState.DRAW_INSUFFICIENT_MATERIAL`;
`GameState.DRAW_REPETITION` is never set.

### Perft

```python
from bitchess.cli import perft
from bitchess.game import Game

print(perft(Game(), 2))
```

## Commands

Count the positions reachable from a position (depth 3 from the starting
position by default):

```
bitchess-perft
bitchess-perft 2 --fen "8/8/8/3pP3/8/8/8/R3K2R w KQ d6 0 1"
```

Search for rook and bishop magic numbers and print them as tables:

```
bitchess-magics
bitchess-magics --seed 1 --piece rook --square 0 --square 7
```

`--piece` is `rook`, `bishop` or `both` (the default); `--square` may be given
several times to limit the search. In Python, `bitchess.magics.find_magic`
raises `MagicNotFoundError` when no magic is found within its trial limit.

## What it does not do

- Promotions always produce a queen; under-promotions are never generated.
- There is no search, evaluation or engine protocol: the package generates and
  counts moves, it does not choose them.
- Positions can be read from FEN but not written back to FEN, and the fullmove
  number is ignored.
- The magic-number search prints tables; move generation itself computes
  sliding attacks by walking rays and does not use magic lookup.