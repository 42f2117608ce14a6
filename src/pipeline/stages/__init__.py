"""
Pipeline stages for the object eraser.

Each stage handles a specific part of the processing pipeline:
- synthesize: removal (inpaint / patch fallback) or annotation
"""

from .synthesize import SynthesizeStage, SynthesizeStats, create_synthesize_stage

__all__ = ["SynthesizeStage", "SynthesizeStats", "create_synthesize_stage"]
