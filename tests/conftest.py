"""
tests/conftest.py
==================
Shared pytest fixtures for all factorkb tests.
"""

import json

import pytest

from factorkb.core.config import SolverConfig
from factorkb.symbolic.knowledge_base import KnowledgeBase


# ─── KNOWLEDGE BASES ──────────────────────────────────────────────


@pytest.fixture
def kb():
    return KnowledgeBase()


@pytest.fixture
def strict_kb():
    return KnowledgeBase(config=SolverConfig.strict())


# ─── SYMBOLS ──────────────────────────────────────────────────────


@pytest.fixture
def weather(kb):
    """rain, wet, cold registered in ``kb``."""
    return kb.symbols("rain", "wet", "cold")


@pytest.fixture
def numbers(kb):
    """x, y, z registered in ``kb``."""
    return kb.symbols("x", "y", "z")


@pytest.fixture
def animals(kb):
    """tom, cat, dog registered in ``kb``."""
    return kb.symbols("tom", "cat", "dog")


# ─── FILES ────────────────────────────────────────────────────────


@pytest.fixture
def assertions_file(tmp_path):
    path = tmp_path / "weather.json"
    path.write_text(json.dumps({
        "assertions": [
            ["implies", "rain", "wet"],
            ["eq", ["add", "x", "y"], 10],
            ["eq", "x", 4],
        ]
    }))
    return path


@pytest.fixture
def conflicting_file(tmp_path):
    path = tmp_path / "conflict.json"
    path.write_text(json.dumps([["eq", "x", 1], ["eq", "x", 2]]))
    return path
