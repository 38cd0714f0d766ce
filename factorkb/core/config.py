"""
factorkb/core/config.py
=======================
Solver configuration for factorkb.
All knobs in one place, passed to a KnowledgeBase at construction.
"""
from __future__ import annotations
from dataclasses import dataclass


@dataclass
class SolverConfig:
    strict_arithmetic: bool  = False   # raise UnsupportedOperation instead of assigning NULL
    simplify_assertions: bool = True   # simplify assertions before and after propagation
    trace_transitions: bool  = False   # debug-log every unsolved → solved transition
    warn_on_conflict: bool   = False   # log a warning when a solve ends inconsistent

    @classmethod
    def strict(cls) -> "SolverConfig":
        """Preset for callers that want unsupported arithmetic and
        inconsistencies surfaced loudly."""
        return cls(strict_arithmetic=True, warn_on_conflict=True)


# Shared default config
DEFAULT_CONFIG = SolverConfig()
