"""Tests for domain and storage exceptions (error_code, message, details)."""

from labelflow.domain.exceptions import (
    AssetTransferException,
    InvalidStatusTransitionException,
    LabelflowException,
    PersistenceException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    TaskVersionConflictException,
    ValidationException,
)
from labelflow.infrastructure.exceptions import (
    InvalidBucketNameError,
    StorageException,
    StorageNotFoundError,
)


def test_labelflow_exception_default_error_code() -> None:
    """Base LabelflowException uses class name as error_code when not provided."""
    exc = LabelflowException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "LabelflowException"
    assert exc.details == {}


def test_to_dict_shape() -> None:
    exc = LabelflowException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    exc = ValidationException("Unknown task status 'x'", field="status")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "status"}


def test_resource_not_found() -> None:
    exc = ResourceNotFoundException("task", 42)
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.details == {"resource_type": "task", "resource_id": 42}


def test_invalid_status_transition_carries_reason() -> None:
    exc = InvalidStatusTransitionException(
        "IN_PROGRESS", "ARCHIVED", "Cannot archive task from status IN_PROGRESS", task_id=3
    )
    assert exc.error_code == "INVALID_STATUS_TRANSITION"
    assert exc.reason == "Cannot archive task from status IN_PROGRESS"
    assert exc.details["task_id"] == 3
    assert "IN_PROGRESS" in exc.message and "ARCHIVED" in exc.message


def test_version_conflict_without_task_id_has_no_details() -> None:
    assert TaskVersionConflictException().details == {}
    assert TaskVersionConflictException(5).details == {"task_id": 5}


def test_persistence_and_service_errors() -> None:
    assert PersistenceException("task", 9).error_code == "PERSISTENCE_ERROR"
    assert SqlNotConfiguredException().error_code == "SERVICE_UNAVAILABLE"
    exc = AssetTransferException(500, "copy", "timeout")
    assert exc.error_code == "ASSET_TRANSFER_UNAVAILABLE"
    assert exc.details == {"asset_id": 500, "operation": "copy", "reason": "timeout"}


def test_storage_errors_are_labelflow_exceptions() -> None:
    exc = StorageNotFoundError("labelflow-1-review", "a.jpg")
    assert isinstance(exc, StorageException)
    assert isinstance(exc, LabelflowException)
    assert exc.details == {"bucket": "labelflow-1-review", "key": "a.jpg"}
    assert InvalidBucketNameError(1, "!!!").error_code == "INVALID_BUCKET_NAME"
