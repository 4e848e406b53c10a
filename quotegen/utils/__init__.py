"""Utility modules for QuoteGen."""

from quotegen.utils.pipeline_logger import (
    log_pipeline_start,
    log_pipeline_complete,
    log_pipeline_failed,
    log_stage_output,
    log_material_resolved,
)

__all__ = [
    "log_pipeline_start",
    "log_pipeline_complete",
    "log_pipeline_failed",
    "log_stage_output",
    "log_material_resolved",
]
