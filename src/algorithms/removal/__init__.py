"""
Object removal algorithms.

Building blocks used by the synthesis stage:
- build_mask: padded, clamped detection boxes -> binary mask
- InpaintingEngine: diffusion hole filling with tagged failures
- PatchSynthesizer: neighbour-patch fallback
- draw_annotations: box and label overlay for annotation mode
"""

from .mask import build_mask, mask_is_empty, padded_region
from .inpaint import InpaintingEngine, INPAINT_METHODS
from .patch import PatchSynthesizer, donor_candidates, find_donor_patch
from .annotate import draw_annotations, format_label

__all__ = [
    "build_mask",
    "mask_is_empty",
    "padded_region",
    "InpaintingEngine",
    "INPAINT_METHODS",
    "PatchSynthesizer",
    "donor_candidates",
    "find_donor_patch",
    "draw_annotations",
    "format_label",
]
