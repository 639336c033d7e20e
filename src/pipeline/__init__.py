"""
Pipeline module for the region export tool.

The pipeline orchestrates the full export flow:
- Sparse frame sampling and activity grid accumulation (pass 1)
- Tracking region estimation
- Per-frame classification, rendering and encoding with backpressure (pass 2)
"""

from .engine import (
    ExportError,
    ExportPipeline,
    ExportResult,
    ExportState,
    create_pipeline_from_config,
    export_video,
)
from .sampler import FrameSampler, extract_frames

__all__ = [
    "ExportError",
    "ExportPipeline",
    "ExportResult",
    "ExportState",
    "create_pipeline_from_config",
    "export_video",
    "FrameSampler",
    "extract_frames",
]
