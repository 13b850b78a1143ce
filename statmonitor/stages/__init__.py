from .aggregate import AggregateStage
from .base_stage import BaseStage
from .reduce import ReduceStage
from .sampler import SamplerStage, slot_index

__all__ = [
    "AggregateStage",
    "BaseStage",
    "ReduceStage",
    "SamplerStage",
    "slot_index",
]
