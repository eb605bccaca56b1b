"""Pydantic schemas for capture and apply reports."""

from .report import ApplyReport, ArtifactUpdate, AssetRecord, CaptureReport, TemplateCapture

__all__ = [
    "ApplyReport",
    "ArtifactUpdate",
    "AssetRecord",
    "CaptureReport",
    "TemplateCapture",
]
