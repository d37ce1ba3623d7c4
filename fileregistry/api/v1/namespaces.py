"""
API Namespaces - Organized endpoint groups
"""

from flask import current_app, request
from flask_restx import Namespace, Resource, marshal

from fileregistry.api.v1.models import (
    error_response,
    file_metadata_response,
    register_file_request,
    register_file_response,
)
from fileregistry.application.registry_service import RegistryService
from fileregistry.domain.errors import (
    ErrorCategory,
    LinkExpiredError,
    PersistenceError,
    RecordNotFoundError,
    UploadError,
    create_error_response,
)


def _registry_service() -> RegistryService:
    return current_app.container.resolve(RegistryService)


# =============================================================================
# Files Namespace - Registration and lookup of stored files
# =============================================================================

files_ns = Namespace("files", description="Stored file operations")


@files_ns.route("")
class FileList(Resource):
    """Register staged uploads"""

    @files_ns.doc("register_file")
    @files_ns.expect(register_file_request, validate=True)
    @files_ns.response(201, "File registered", register_file_response)
    @files_ns.response(400, "Bad Request", error_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def post(self):
        """
        Register a staged upload

        Moves the fully written staged file into permanent storage and returns
        the short identifier that resolves it for the next 48 hours.
        """
        data = request.get_json()
        temp_ref = (data.get("temp_ref") or "").strip()
        filename = (data.get("filename") or "").strip()

        if not temp_ref or not filename:
            return create_error_response(
                ErrorCategory.INVALID_REQUEST,
                "temp_ref and filename are required",
                status_code=400,
            )

        try:
            short_id = _registry_service().register_file(
                temp_ref,
                filename,
                data["size_bytes"],
                data.get("content_type"),
            )
            return {"short_id": short_id}, 201

        except UploadError as e:
            current_app.logger.error(f"Upload registration failed ({e.kind.value}): {e}")
            return create_error_response(
                ErrorCategory.SYSTEM_ERROR, str(e), status_code=500
            )
        except Exception as e:
            current_app.logger.exception(f"Unexpected error registering upload: {e}")
            return create_error_response(
                ErrorCategory.SYSTEM_ERROR, f"Unexpected error: {e}", status_code=500
            )


@files_ns.route("/<string:short_id>")
@files_ns.param("short_id", "The public short identifier")
class File(Resource):
    """Stored file operations"""

    @files_ns.doc("get_file")
    @files_ns.response(200, "Success", file_metadata_response)
    @files_ns.response(404, "File Not Found", error_response)
    @files_ns.response(410, "Link Expired", error_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def get(self, short_id):
        """
        Resolve a short identifier

        Returns where the bytes are stored with the original metadata. Expired
        links answer 410 even before the sweep has purged them.
        """
        try:
            file_data = _registry_service().get_file(short_id)
            return marshal(file_data, file_metadata_response), 200

        except RecordNotFoundError:
            return create_error_response(
                ErrorCategory.FILE_NOT_FOUND, f"File {short_id} not found", status_code=404
            )
        except LinkExpiredError:
            return create_error_response(
                ErrorCategory.FILE_EXPIRED, f"File {short_id} expired", status_code=410
            )
        except PersistenceError as e:
            current_app.logger.error(f"Record store error resolving {short_id}: {e}")
            return create_error_response(
                ErrorCategory.SYSTEM_ERROR, str(e), status_code=500
            )
        except Exception as e:
            current_app.logger.exception(f"Unexpected error resolving {short_id}: {e}")
            return create_error_response(
                ErrorCategory.SYSTEM_ERROR, f"Unexpected error: {e}", status_code=500
            )

    @files_ns.doc("delete_file")
    @files_ns.response(204, "File deleted")
    @files_ns.response(500, "Internal Server Error", error_response)
    def delete(self, short_id):
        """
        Delete a stored file

        Removes the stored bytes and the record. Deleting an unknown or already
        purged identifier also answers 204.
        """
        try:
            _registry_service().delete_file(short_id)
            return "", 204

        except Exception as e:
            current_app.logger.exception(f"Error deleting file {short_id}: {e}")
            return create_error_response(
                ErrorCategory.SYSTEM_ERROR, f"Delete failed: {e}", status_code=500
            )
