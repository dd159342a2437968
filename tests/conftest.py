import random

import pytest

from game.state import GameState
from game.types import Contract


class FakeClock:
    """Millisecond clock the tests advance by hand."""

    def __init__(self, now: int = 1_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


def make_contract(pattern, reward=10, rank_level=1, contract_id="contract_test"):
    cells = sum(1 for row in pattern for c in row if c is not None)
    return Contract(
        id=contract_id,
        rank_level=rank_level,
        rank_name="Novice",
        pattern=[list(row) for row in pattern],
        reward=reward,
        cell_count=cells,
        created_at=0,
    )


def pattern_with(cells, width=4, height=4):
    pattern = [[None] * width for _ in range(height)]
    for x, y, color in cells:
        pattern[y][x] = color
    return pattern


@pytest.fixture
def state():
    return GameState()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)
