import importlib

import pytest

from tilebody import harness_constants


@pytest.fixture
def reload_constants(monkeypatch):
    def _reload(**env):
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return importlib.reload(harness_constants)

    yield _reload
    monkeypatch.undo()
    importlib.reload(harness_constants)


def test_defaults(reload_constants, monkeypatch):
    for name in ("TILEBODY_TOLERANCE", "TILEBODY_TEST_STEPS", "TILEBODY_PERFORMANCE_STEPS"):
        monkeypatch.delenv(name, raising=False)
    constants = reload_constants()
    assert constants.TOLERANCE == 1e-5
    assert constants.TEST_STEPS == 5
    assert constants.PERFORMANCE_STEPS == 10


def test_valid_overrides(reload_constants, capsys):
    constants = reload_constants(
        TILEBODY_TOLERANCE="1e-4",
        TILEBODY_TEST_STEPS="7",
        TILEBODY_PERFORMANCE_STEPS="20",
    )
    assert constants.TOLERANCE == 1e-4
    assert constants.TEST_STEPS == 7
    assert constants.PERFORMANCE_STEPS == 20
    assert "[warning]" not in capsys.readouterr().out


@pytest.mark.parametrize("name, value, attr, default", [
    ("TILEBODY_TEST_STEPS", "5x", "TEST_STEPS", 5),
    ("TILEBODY_TEST_STEPS", "-3", "TEST_STEPS", 5),
    ("TILEBODY_PERFORMANCE_STEPS", "0", "PERFORMANCE_STEPS", 10),
    ("TILEBODY_TOLERANCE", "tight", "TOLERANCE", 1e-5),
    ("TILEBODY_TOLERANCE", "-1e-5", "TOLERANCE", 1e-5),
])
def test_bad_overrides_warn_and_fall_back(reload_constants, capsys, name, value, attr, default):
    constants = reload_constants(**{name: value})
    assert getattr(constants, attr) == default
    out = capsys.readouterr().out
    assert f"[warning] ignoring {name}={value!r}" in out
