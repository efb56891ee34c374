"""
Training orchestration: the RUNNING/STOPPED generation loop.
"""
from .loop import GenerationLoop, LoopState

__all__ = [
    'GenerationLoop',
    'LoopState',
]
