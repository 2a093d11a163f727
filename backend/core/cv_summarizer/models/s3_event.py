"""
Upload notification schema.

Normalized view of one S3 ObjectCreated record delivered to the intake
Lambda.

Dependencies: pydantic
System role: Intake gate input contract
"""

from pydantic import BaseModel, ConfigDict, Field


class UploadNotification(BaseModel):
    """Document upload notification extracted from an S3 event record."""

    bucket: str = Field(..., description="Bucket the object was written to")
    key: str = Field(..., description="URL-decoded object key (prefix/user_id/file_name)")
    size: int = Field(..., ge=0, description="Object size in bytes")
    source_ip: str | None = Field(default=None, description="Uploader IP from requestParameters")
    event_time: str | None = Field(default=None, description="S3 eventTime")
    sequencer: str | None = Field(
        default=None,
        description="S3 object sequencer; identical on redelivery of the same event",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "bucket": "cv-summarizer-uploads",
                "key": "uploads/42/resume.pdf",
                "size": 10000,
                "source_ip": "203.0.113.10",
                "event_time": "2026-01-05T10:00:00.000Z",
                "sequencer": "0065A1B2C3D4E5F601",
            }
        }
    )
