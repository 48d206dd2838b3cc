from types import SimpleNamespace

import pytest

from sqlaresource.errors import (
    InvalidContentError,
    NotFoundError,
    QueryError,
    RecordValidationError,
    ValidationError,
    field_error,
    handle_errors,
    translate_error,
)


def test_error_bodies():
    assert NotFoundError(5).to_dict() == {"code": "ResourceNotFound", "message": "5"}
    assert NotFoundError(5).status_code == 404
    assert InvalidContentError("No update data sent").to_dict() == {"code": "InvalidContent", "message": "No update data sent"}
    assert QueryError("Expecting value").to_dict() == {"message": "Query is not a valid JSON object", "errors": "Expecting value"}
    errors = {"title": field_error("title", "required", "title is required")}
    assert ValidationError(errors).to_dict() == {"message": "Validation failed", "errors": errors}


def test_field_error():
    assert field_error("date", "cast", "Cast failed", "x") == {"message": "Cast failed", "kind": "cast", "path": "date", "value": "x"}


def test_translate_error():
    errors = {"title": field_error("title", "required", "title is required")}
    translated = translate_error(RecordValidationError(errors))
    assert isinstance(translated, ValidationError)
    assert translated.errors == errors

    other = KeyError("x")
    assert translate_error(other) is other


@pytest.fixture
def session():
    session = SimpleNamespace(rollbacks=0)

    def rollback():
        session.rollbacks += 1

    session.rollback = rollback
    return session


def test_handle_errors_renders_resource_errors(app, session):
    @handle_errors(lambda: session)
    def view():
        raise NotFoundError("abc")

    with app.app_context():
        response = view()
    assert response.status_code == 404
    assert response.get_json() == {"code": "ResourceNotFound", "message": "abc"}
    assert session.rollbacks == 1


def test_handle_errors_reraises_other_errors(session):
    @handle_errors(lambda: session)
    def view():
        raise RuntimeError("database is gone")

    with pytest.raises(RuntimeError):
        view()
    assert session.rollbacks == 1


def test_handle_errors_success(session):
    @handle_errors(lambda: session)
    def view(id):
        return id

    assert view(id=3) == 3
    assert view.__name__ == "view"
    assert session.rollbacks == 0
