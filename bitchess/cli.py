"""Command-line perft counter."""

import argparse

from .board import STARTING_FEN
from .game import Game


def perft(game: Game, depth: int) -> int:
    """Number of leaf positions reached by playing legal moves to `depth`."""
    if depth == 0:
        return 1
    nodes = 0
    for move in game.move_gen.generate_all_legal_moves(game.board):
        game.do_move(move)
        nodes += perft(game, depth - 1)
        game.undo_move()
    return nodes


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Count perft nodes from a position.")
    parser.add_argument("depth", nargs="?", type=int, default=3, help="search depth")
    parser.add_argument("--fen", default=STARTING_FEN, help="starting position")
    args = parser.parse_args(argv)
    if args.depth < 0:
        parser.error("depth must not be negative")

    game = Game(args.fen)
    print(f"Perft ({args.depth}): {perft(game, args.depth)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())