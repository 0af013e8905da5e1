"""
Learning: the two learner models behind the engine.

- memory_model: per-item forgetting curve (simplified FSRS)
- ability_estimator: global theta and uncertainty (IRT-style)
"""

from . import ability_estimator, memory_model

__all__ = [
    "ability_estimator",
    "memory_model",
]
