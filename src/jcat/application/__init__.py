"""Application layer: per-directory concatenation and batch orchestration."""

from jcat.application.concat import concatenate
from jcat.application.engine import Engine, ProgressCounter, run_cat

__all__ = ["Engine", "ProgressCounter", "concatenate", "run_cat"]
