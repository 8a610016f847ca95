"""Tests for custom exceptions and error handling."""

from fastapi import status

from roome.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RooMeError,
    ValidationError,
)


def test_roome_error_base() -> None:
    """Test base RooMeError."""
    error = RooMeError(message="Test error", code="test_error")
    assert error.message == "Test error"
    assert error.code == "test_error"
    assert error.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert error.details == {}


def test_not_found_error() -> None:
    """Test NotFoundError."""
    error = NotFoundError("Component")
    assert error.message == "Component not found"
    assert error.code == "not_found"
    assert error.status_code == status.HTTP_404_NOT_FOUND

    error_with_id = NotFoundError("Component", "promo-banner")
    assert error_with_id.message == "Component 'promo-banner' not found"


def test_validation_error() -> None:
    """Test ValidationError."""
    error = ValidationError("Invalid config", field="config")
    assert error.message == "Invalid config"
    assert error.code == "validation_error"
    assert error.status_code == status.HTTP_400_BAD_REQUEST
    assert error.details == {"field": "config"}


def test_validation_error_with_errors() -> None:
    errors = [{"loc": ["fields"], "msg": "Input should be a valid list", "type": "list_type"}]
    error = ValidationError("Invalid config", field="config", errors=errors)
    assert error.details == {"field": "config", "errors": errors}


def test_authentication_error() -> None:
    """Test AuthenticationError."""
    error = AuthenticationError()
    assert error.message == "Authentication required"
    assert error.code == "authentication_error"
    assert error.status_code == status.HTTP_401_UNAUTHORIZED


def test_authorization_error() -> None:
    """Test AuthorizationError."""
    error = AuthorizationError()
    assert error.message == "Admin access required"
    assert error.code == "authorization_error"
    assert error.status_code == status.HTTP_403_FORBIDDEN


def test_conflict_error() -> None:
    """Test ConflictError."""
    error = ConflictError("Component with name 'x' already exists")
    assert error.code == "conflict"
    assert error.status_code == status.HTTP_409_CONFLICT
