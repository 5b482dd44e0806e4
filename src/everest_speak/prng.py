"""Seeded pseudo-random generator (cyrb128 seeding, sfc32 stepping).

Everything here is a pure function of its inputs so that every device
derives the same sequence from the same key.
"""
import struct

MASK32 = 0xFFFFFFFF
TWO_32 = 4294967296.0

State = tuple[int, int, int, int]


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK32


def _utf16_units(key: str) -> tuple[int, ...]:
    data = key.encode("utf-16-le")
    return struct.unpack(f"<{len(data) // 2}H", data)


def seed_state(key: str) -> State:
    """Hash a string key into four 32-bit words.

    Args:
        key: Any string, typically an ISO day string such as "2026-01-03".

    Returns:
        Tuple of four unsigned 32-bit integers.
    """
    h1, h2, h3, h4 = 1779033703, 3144134277, 1013904242, 2773480762
    for k in _utf16_units(key):
        h1 = h2 ^ _imul(h1 ^ k, 597399067)
        h2 = h3 ^ _imul(h2 ^ k, 2869860233)
        h3 = h4 ^ _imul(h3 ^ k, 951274213)
        h4 = h1 ^ _imul(h4 ^ k, 2716044179)
    h1 = _imul(h3 ^ (h1 >> 18), 597399067)
    h2 = _imul(h4 ^ (h2 >> 22), 2869860233)
    h3 = _imul(h1 ^ (h3 >> 17), 951274213)
    h4 = _imul(h2 ^ (h4 >> 19), 2716044179)
    h1 ^= h2 ^ h3 ^ h4
    h2 ^= h1
    h3 ^= h1
    h4 ^= h1
    return (h1 & MASK32, h2 & MASK32, h3 & MASK32, h4 & MASK32)


def next_float(state: State) -> tuple[float, State]:
    """Advance an sfc32 state by one step.

    Returns:
        (value in [0, 1), successor state)
    """
    a, b, c, d = state
    t = (a + b) & MASK32
    a = b ^ (b >> 9)
    b = (c + (c << 3)) & MASK32
    c = ((c << 21) | (c >> 11)) & MASK32
    d = (d + 1) & MASK32
    t = (t + d) & MASK32
    c = (c + t) & MASK32
    return t / TWO_32, (a, b, c, d)


class SeededRandom:
    """Stateful wrapper over seed_state/next_float."""

    def __init__(self, key: str):
        self.key = key
        self.state = seed_state(key)

    def random(self) -> float:
        value, self.state = next_float(self.state)
        return value
