"""
API Models for request/response validation and Swagger documentation
"""

from flask_restx import fields

from fileregistry.api.v1 import api

# =============================================================================
# Request Models
# =============================================================================

register_file_request = api.model(
    "RegisterFileRequest",
    {
        "temp_ref": fields.String(
            required=True,
            description="Name of the fully written staged file in the staging directory",
            example="0b6f2c1e-upload",
        ),
        "filename": fields.String(
            required=True,
            description="Original client-supplied filename",
            example="report.pdf",
        ),
        "size_bytes": fields.Integer(
            required=True, description="Size of the upload in bytes", min=0, example=2048
        ),
        "content_type": fields.String(
            required=False,
            description="Sniffed MIME type",
            example="application/pdf",
        ),
    },
)

# =============================================================================
# Response Models
# =============================================================================

register_file_response = api.model(
    "RegisterFileResponse",
    {
        "short_id": fields.String(description="Public short identifier", example="aZ3k9"),
    },
)

file_metadata_response = api.model(
    "FileMetadataResponse",
    {
        "storage_path": fields.String(description="Location of the stored bytes"),
        "filename": fields.String(description="Original filename"),
        "size_bytes": fields.Integer(description="Size in bytes"),
        "content_type": fields.String(description="MIME type"),
        "expires_at": fields.DateTime(description="Expiration time (UTC, ISO 8601)"),
        "remaining_seconds": fields.Integer(description="Seconds until the link expires"),
    },
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "title": fields.String(description="Short error title"),
        "message": fields.String(description="User-facing error message"),
        "action": fields.String(description="Suggested next step"),
    },
)
