"""
Unit tests for API REST endpoints.

Tests the files namespace with a mocked RegistryService.
Validates request handling, response formatting, and status codes.
"""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from flask import Flask
from flask_restx import Api

from fileregistry.api.v1.namespaces import files_ns
from fileregistry.application.registry_service import RegistryService
from fileregistry.domain.errors import (
    ErrorCategory,
    IdentifierExhaustedError,
    LinkExpiredError,
    OrphanedStorageError,
    PersistenceError,
    RecordNotFoundError,
    StorageMoveError,
)

EXPIRES_AT = datetime(2024, 1, 17, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_registry_service():
    service = Mock(spec=RegistryService)
    service.register_file.return_value = "aZ3k9"
    service.get_file.return_value = {
        "storage_path": "/srv/storage/0f3c.dat",
        "filename": "report.pdf",
        "size_bytes": 2048,
        "content_type": "application/pdf",
        "created_at": datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
        "expires_at": EXPIRES_AT,
        "remaining_seconds": 169200,
    }
    service.delete_file.return_value = True
    return service


@pytest.fixture
def mock_container(mock_registry_service):
    container = Mock()
    container.resolve.side_effect = lambda cls: {
        RegistryService: mock_registry_service,
    }[cls]
    return container


@pytest.fixture
def flask_app(mock_container):
    """Create Flask app for testing."""
    app = Flask(__name__)
    app.config['TESTING'] = True

    api = Api(app, version='1.0', title='File Registry API', doc='/doc')
    api.add_namespace(files_ns, path='/api/v1/files')

    app.container = mock_container
    return app


@pytest.fixture
def client(flask_app):
    return flask_app.test_client()


VALID_BODY = {
    "temp_ref": "tmp-a",
    "filename": "report.pdf",
    "size_bytes": 2048,
    "content_type": "application/pdf",
}


# =============================================================================
# POST /api/v1/files
# =============================================================================

def test_register_file_returns_short_id(client, mock_registry_service):
    response = client.post('/api/v1/files', json=VALID_BODY)

    assert response.status_code == 201
    assert response.get_json() == {"short_id": "aZ3k9"}
    mock_registry_service.register_file.assert_called_once_with(
        "tmp-a", "report.pdf", 2048, "application/pdf"
    )


def test_register_file_without_content_type(client, mock_registry_service):
    body = {k: v for k, v in VALID_BODY.items() if k != "content_type"}

    response = client.post('/api/v1/files', json=body)

    assert response.status_code == 201
    mock_registry_service.register_file.assert_called_once_with("tmp-a", "report.pdf", 2048, None)


@pytest.mark.parametrize("missing", ["temp_ref", "filename", "size_bytes"])
def test_register_file_missing_field_is_400(client, mock_registry_service, missing):
    body = {k: v for k, v in VALID_BODY.items() if k != missing}

    response = client.post('/api/v1/files', json=body)

    assert response.status_code == 400
    mock_registry_service.register_file.assert_not_called()


def test_register_file_blank_temp_ref_is_400(client, mock_registry_service):
    response = client.post('/api/v1/files', json={**VALID_BODY, "temp_ref": "   "})

    assert response.status_code == 400
    assert response.get_json()["error"] == ErrorCategory.INVALID_REQUEST.value
    mock_registry_service.register_file.assert_not_called()


def test_register_file_negative_size_is_400(client):
    response = client.post('/api/v1/files', json={**VALID_BODY, "size_bytes": -1})
    assert response.status_code == 400


@pytest.mark.parametrize(
    "error",
    [
        StorageMoveError("Could not move staged upload 'tmp-a'"),
        OrphanedStorageError("insert failed", storage_path="/srv/storage/0f3c.dat"),
        IdentifierExhaustedError("exhausted", storage_path="/srv/storage/0f3c.dat"),
    ],
)
def test_register_file_failure_is_generic_500(client, mock_registry_service, error):
    mock_registry_service.register_file.side_effect = error

    response = client.post('/api/v1/files', json=VALID_BODY)

    assert response.status_code == 500
    data = response.get_json()
    assert data["error"] == ErrorCategory.SYSTEM_ERROR.value
    assert "/srv/storage" not in response.get_data(as_text=True)
    assert "tmp-a" not in response.get_data(as_text=True)


def test_register_file_unexpected_error_is_500(client, mock_registry_service):
    mock_registry_service.register_file.side_effect = RuntimeError("boom")

    response = client.post('/api/v1/files', json=VALID_BODY)

    assert response.status_code == 500
    assert "boom" not in response.get_data(as_text=True)


# =============================================================================
# GET /api/v1/files/<short_id>
# =============================================================================

def test_get_file_returns_metadata(client, mock_registry_service):
    response = client.get('/api/v1/files/aZ3k9')

    assert response.status_code == 200
    data = response.get_json()
    assert data == {
        "storage_path": "/srv/storage/0f3c.dat",
        "filename": "report.pdf",
        "size_bytes": 2048,
        "content_type": "application/pdf",
        "expires_at": "2024-01-17T12:00:00+00:00",
        "remaining_seconds": 169200,
    }
    mock_registry_service.get_file.assert_called_once_with("aZ3k9")


def test_get_file_not_found_is_404(client, mock_registry_service):
    mock_registry_service.get_file.side_effect = RecordNotFoundError("File not found for id: zzzzz")

    response = client.get('/api/v1/files/zzzzz')

    assert response.status_code == 404
    assert response.get_json()["error"] == ErrorCategory.FILE_NOT_FOUND.value


def test_get_file_expired_is_410(client, mock_registry_service):
    mock_registry_service.get_file.side_effect = LinkExpiredError("Link has expired: aZ3k9")

    response = client.get('/api/v1/files/aZ3k9')

    assert response.status_code == 410
    assert response.get_json()["error"] == ErrorCategory.FILE_EXPIRED.value


def test_get_file_store_failure_is_500(client, mock_registry_service):
    mock_registry_service.get_file.side_effect = PersistenceError("database is locked")

    response = client.get('/api/v1/files/aZ3k9')

    assert response.status_code == 500
    assert "database is locked" not in response.get_data(as_text=True)


# =============================================================================
# DELETE /api/v1/files/<short_id>
# =============================================================================

def test_delete_file_is_204(client, mock_registry_service):
    response = client.delete('/api/v1/files/aZ3k9')

    assert response.status_code == 204
    mock_registry_service.delete_file.assert_called_once_with("aZ3k9")


def test_delete_unknown_file_is_204(client, mock_registry_service):
    mock_registry_service.delete_file.return_value = False

    response = client.delete('/api/v1/files/zzzzz')

    assert response.status_code == 204


def test_delete_store_failure_is_500(client, mock_registry_service):
    mock_registry_service.delete_file.side_effect = PersistenceError("database is locked")

    response = client.delete('/api/v1/files/aZ3k9')

    assert response.status_code == 500
