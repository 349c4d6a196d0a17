"""Fixtures shared by the rules tests."""

import pytest

from src.jarls.state import GameState
from tests.jarls.scenarios import S, W, StateFactory, build_state


@pytest.fixture
def state_factory() -> StateFactory:
    return build_state


@pytest.fixture
def open_field() -> GameState:
    """Both sides have two warriors and a shield, far apart, nobody is threatened. alice to move."""
    return build_state(
        {
            "alice-w1": (W, -3, 2),
            "alice-w2": (W, 1, 2),
            "alice-s1": (S, 2, 1),
            "bob-w1": (W, 0, -3),
            "bob-w2": (W, -3, 0),
            "bob-s1": (S, -1, -2),
        }
    )
