"""Pytest configuration and shared fixtures."""

import pytest

from calc_engine.config.defaults import get_default_config
from calc_engine.engine import CalculatorEngine
from calc_engine.expression.models import AngleMode
from calc_engine.persistence.history_store import HistoryStore


@pytest.fixture
def engine() -> CalculatorEngine:
    """Advanced-mode engine in radians without history."""
    return CalculatorEngine(get_default_config())


@pytest.fixture
def degree_engine() -> CalculatorEngine:
    """Engine evaluating trigonometry in degrees."""
    engine = CalculatorEngine(get_default_config())
    engine.set_angle_mode(AngleMode.DEGREES)
    return engine


@pytest.fixture
def history_store(tmp_path) -> HistoryStore:
    """History store backed by a temporary database."""
    return HistoryStore(str(tmp_path / "history.db"))


@pytest.fixture
def engine_with_history(history_store: HistoryStore) -> CalculatorEngine:
    """Engine that records finished calculations."""
    return CalculatorEngine(get_default_config(), history_store=history_store)
