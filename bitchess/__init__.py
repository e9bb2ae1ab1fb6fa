"""Bitboard chess: FEN boards, legal move generation, games, perft and a magic-number search."""

__version__ = "0.1.0"