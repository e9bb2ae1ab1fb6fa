"""Search for magic multipliers that index sliding-piece attack tables."""

import argparse
import random

_U64 = (1 << 64) - 1
_U32 = (1 << 32) - 1
_TOP_BYTE = 0xFF00000000000000
_MAX_TRIES = 100_000_000
_MAX_BITS = 12

ROOK_BITS = (
    12, 11, 11, 11, 11, 11, 11, 12,
    11, 10, 10, 10, 10, 10, 10, 11,
    11, 10, 10, 10, 10, 10, 10, 11,
    11, 10, 10, 10, 10, 10, 10, 11,
    11, 10, 10, 10, 10, 10, 10, 11,
    11, 10, 10, 10, 10, 10, 10, 11,
    11, 10, 10, 10, 10, 10, 10, 11,
    12, 11, 11, 11, 11, 11, 11, 12,
)

BISHOP_BITS = (
    6, 5, 5, 5, 5, 5, 5, 6,
    5, 5, 5, 5, 5, 5, 5, 5,
    5, 5, 7, 7, 7, 7, 5, 5,
    5, 5, 7, 9, 9, 7, 5, 5,
    5, 5, 7, 9, 9, 7, 5, 5,
    5, 5, 7, 7, 7, 7, 5, 5,
    5, 5, 5, 5, 5, 5, 5, 5,
    6, 5, 5, 5, 5, 5, 5, 6,
)

_ROOK_DIRECTIONS = ((1, 0), (-1, 0), (0, 1), (0, -1))
_BISHOP_DIRECTIONS = ((1, 1), (1, -1), (-1, 1), (-1, -1))


class MagicNotFoundError(RuntimeError):
    """Raised when no magic number was found within the trial limit."""


def random_u64_fewbits(rng: random.Random) -> int:
    """A random 64-bit number with few bits set (three draws ANDed together)."""
    return rng.getrandbits(64) & rng.getrandbits(64) & rng.getrandbits(64)


def count_ones(bitboard: int) -> int:
    """Number of set bits in a 64-bit bitboard."""
    return bin(bitboard & _U64).count("1")


def _low_bits(bitboard: int):
    while bitboard:
        low = bitboard & -bitboard
        yield low.bit_length() - 1
        bitboard ^= low


def index_to_bitboard(index: int, bits: int, mask: int) -> int:
    """The subset of `mask` selected by `index`, bit i choosing the i-th lowest square."""
    result = 0
    for position, square in enumerate(_low_bits(mask & _U64)):
        if position >= bits:
            break
        if index & (1 << position):
            result |= 1 << square
    return result


def _ray_mask(square: int, directions) -> int:
    result = 0
    start_rank, start_file = divmod(square, 8)
    for d_rank, d_file in directions:
        rank, file = start_rank + d_rank, start_file + d_file
        # Stop one short of the edge along the direction of travel.
        while (d_rank == 0 or 1 <= rank <= 6) and (d_file == 0 or 1 <= file <= 6):
            result |= 1 << (rank * 8 + file)
            rank += d_rank
            file += d_file
    return result


def rook_mask(square: int) -> int:
    """Relevant occupancy squares for a rook: its lines, edges excluded."""
    return _ray_mask(square, _ROOK_DIRECTIONS)


def bishop_mask(square: int) -> int:
    """Relevant occupancy squares for a bishop: its diagonals, edges excluded."""
    return _ray_mask(square, _BISHOP_DIRECTIONS)


def _ray_attacks(square: int, block: int, directions) -> int:
    result = 0
    start_rank, start_file = divmod(square, 8)
    for d_rank, d_file in directions:
        rank, file = start_rank + d_rank, start_file + d_file
        while 0 <= rank <= 7 and 0 <= file <= 7:
            bit = 1 << (rank * 8 + file)
            result |= bit
            if block & bit:
                break
            rank += d_rank
            file += d_file
    return result


def rook_attacks_slow(square: int, block: int) -> int:
    """Rook attacks from `square`, each ray stopping at the first blocker."""
    return _ray_attacks(square, block, _ROOK_DIRECTIONS)


def bishop_attacks_slow(square: int, block: int) -> int:
    """Bishop attacks from `square`, each ray stopping at the first blocker."""
    return _ray_attacks(square, block, _BISHOP_DIRECTIONS)


def transform(bitboard: int, magic: int, bits: int) -> int:
    """Table index of `bitboard` under `magic`, using two 32-bit products."""
    if not 0 <= bits <= 32:
        raise ValueError(f"bits must be between 0 and 32, got {bits}")
    low = ((bitboard & _U32) * (magic & _U32)) & _U32
    high = (((bitboard >> 32) & _U32) * ((magic >> 32) & _U32)) & _U32
    return (low ^ high) >> (32 - bits)


def find_magic(square: int, bits: int, bishop: bool, rng: random.Random | None = None) -> int:
    """A magic that maps every blocker set of `square` to a consistent index of `bits` bits."""
    if not 0 <= square < 64:
        raise ValueError(f"square must be between 0 and 63, got {square}")
    if not 1 <= bits <= _MAX_BITS:
        raise ValueError(f"bits must be between 1 and {_MAX_BITS}, got {bits}")
    if rng is None:
        rng = random.Random()

    mask = bishop_mask(square) if bishop else rook_mask(square)
    attacks_of = bishop_attacks_slow if bishop else rook_attacks_slow
    relevant = count_ones(mask)
    occupancies = [index_to_bitboard(i, relevant, mask) for i in range(1 << relevant)]
    pairs = [(occupancy, attacks_of(square, occupancy)) for occupancy in occupancies]

    for _ in range(_MAX_TRIES):
        magic = random_u64_fewbits(rng)
        if count_ones((mask * magic) & _TOP_BYTE) < 6:
            continue
        used = [0] * (1 << bits)
        for occupancy, attacks in pairs:
            index = transform(occupancy, magic, bits)
            if used[index] == 0:
                used[index] = attacks
            elif used[index] != attacks:
                break
        else:
            return magic
    raise MagicNotFoundError(f"no magic found for square {square}")


def _print_table(name: str, squares, bits_table, bishop: bool, rng: random.Random) -> None:
    print(f"const U64 {name}[64] = {{")
    for square in squares:
        try:
            magic = find_magic(square, bits_table[square], bishop, rng)
        except MagicNotFoundError:
            print("***Failed***")
            magic = 0
        print(f"  0x{magic:x}ULL,")
    print("};\n")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Search for rook and bishop magic numbers.")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument(
        "--piece", choices=("rook", "bishop", "both"), default="both", help="which tables to print"
    )
    parser.add_argument(
        "--square", type=int, action="append", default=None, help="restrict to a square (repeatable)"
    )
    args = parser.parse_args(argv)

    squares = args.square if args.square else list(range(64))
    for square in squares:
        if not 0 <= square < 64:
            parser.error(f"square must be between 0 and 63, got {square}")

    rng = random.Random(args.seed)
    if args.piece in ("rook", "both"):
        _print_table("RMagic", squares, ROOK_BITS, False, rng)
    if args.piece in ("bishop", "both"):
        _print_table("BMagic", squares, BISHOP_BITS, True, rng)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())