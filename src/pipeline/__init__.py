"""
Pipeline module for the object eraser.

The pipeline orchestrates the full processing flow:
- Frame acquisition from observation sources
- Asynchronous detection with stale-result rejection
- Removal or annotation (via SynthesizeStage)
- Publishing to the presentation sink
"""

from .engine import PipelineEngine, PipelineConfig, create_engine_from_config
from .stages.synthesize import SynthesizeStage, SynthesizeStats, create_synthesize_stage

__all__ = [
    "PipelineEngine",
    "PipelineConfig",
    "create_engine_from_config",
    "SynthesizeStage",
    "SynthesizeStats",
    "create_synthesize_stage",
]
