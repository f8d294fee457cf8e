import pytest

import config_manager
from display import format_result
from executor import Environment, evaluate
from parser import parse


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep a config.json next to the sources from leaking into tests."""
    path = tmp_path / "config.json"
    monkeypatch.setattr(config_manager, "config_json", path)
    return path


@pytest.fixture
def env():
    return Environment()


@pytest.fixture
def calc(env):
    """Parse and evaluate one line against the shared env."""
    def _calc(line):
        return evaluate(parse(line, env), env)
    return _calc


@pytest.fixture
def show(calc):
    """Like calc, but returns the printed form of the result."""
    def _show(line):
        return format_result(calc(line))
    return _show
