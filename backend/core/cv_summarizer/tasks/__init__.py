"""
Task modules for the CV summarizer pipeline.

Exports: S3ArtifactStore, TextractOCRTask, SummarizationTask
"""

from .ocr_task import TextractOCRTask
from .storage_task import S3ArtifactStore, artifact_key, artifact_timestamp
from .summarization_task import SummarizationTask

__all__ = [
    "S3ArtifactStore",
    "artifact_key",
    "artifact_timestamp",
    "TextractOCRTask",
    "SummarizationTask",
]
