from __future__ import annotations

from http import HTTPStatus

import pytest
from flask import Flask, abort
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from authgate.domain.users.exceptions import (
    AccountLockedError,
    AuthorizationError,
    InvalidCredentialsError,
    RegistrationError,
)
from authgate.shared.errors import InfrastructureError, ValidationError, raise_validation_error
from authgate.shared.errors.validation import format_field_errors
from authgate.shared.middleware.error_handler import configure_error_handling


class _Payload(BaseModel):
    email: str
    password: str


def test_error_kinds_carry_codes_and_statuses() -> None:
    assert InvalidCredentialsError().status == HTTPStatus.UNAUTHORIZED
    assert InvalidCredentialsError().to_dict() == {"error": "invalid_credentials"}
    assert AuthorizationError().code == "unauthorized"
    assert AccountLockedError(12.34).to_dict() == {
        "error": "account_locked",
        "context": {"lockout_remaining_seconds": 12.3},
    }


def test_registration_error_lists_fields() -> None:
    error = RegistrationError([("password", "missing"), ("email", "missing")])

    assert isinstance(error, ValidationError)
    assert error.status == HTTPStatus.UNPROCESSABLE_ENTITY
    assert error.fields == ["email", "password"]


def test_format_field_errors_keeps_order_of_errors() -> None:
    formatted = format_field_errors([("name", "missing"), ("email", "duplicate")])

    assert formatted["fields"] == ["email", "name"]
    assert formatted["errors"][0] == {"field": "name", "type": "missing"}


def test_raise_validation_error_converts_pydantic() -> None:
    with pytest.raises(PydanticValidationError) as captured:
        _Payload.model_validate({"email": "ada@example.com"})

    with pytest.raises(ValidationError) as excinfo:
        raise_validation_error(captured.value)

    assert excinfo.value.fields == ["password"]


@pytest.fixture()
def failing_app() -> Flask:
    app = Flask(__name__)
    configure_error_handling(app)

    @app.get("/storage")
    def storage():
        raise InfrastructureError("storage_error", context={"dsn": "sqlite:///x.db"})

    @app.get("/boom")
    def boom():
        raise RuntimeError("password=secret123")

    @app.get("/missing")
    def missing():
        abort(404)

    return app


def test_infrastructure_errors_hide_details(failing_app: Flask) -> None:
    response = failing_app.test_client().get("/storage")

    assert response.status_code == 500
    assert response.get_json() == {"error": "internal_error"}


def test_unexpected_errors_are_generic(failing_app: Flask) -> None:
    response = failing_app.test_client().get("/boom")

    assert response.status_code == 500
    assert response.get_json() == {"error": "internal_error"}


def test_http_exceptions_pass_through(failing_app: Flask) -> None:
    assert failing_app.test_client().get("/missing").status_code == 404
