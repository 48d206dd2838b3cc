import datetime
import decimal
import json
import uuid

import pytest

from sqlaresource.errors import NotFoundError
from sqlaresource.json_encoder import dumps, is_record, to_dict
from sqlaresource.projection import project, project_list


def test_dumps_common_types():
    value = {
        "date": datetime.date(2024, 1, 2),
        "datetime": datetime.datetime(2024, 1, 2, 3, 4, 5),
        "delta": datetime.timedelta(minutes=1),
        "uuid": uuid.UUID("12345678-1234-5678-1234-567812345678"),
        "decimal": decimal.Decimal("1.5"),
        "set": {1},
        "bytes": b"\x01",
    }
    assert json.loads(dumps(value)) == {
        "date": "2024-01-02",
        "datetime": "2024-01-02T03:04:05",
        "delta": "0:01:00",
        "uuid": "12345678-1234-5678-1234-567812345678",
        "decimal": 1.5,
        "set": [1],
        "bytes": "01",
    }


def test_dumps_unknown_type():
    with pytest.raises(TypeError):
        dumps(object())


def test_is_record(models):
    Note, _ = models
    assert is_record(Note(title="a"))
    assert not is_record(Note)
    assert not is_record({"title": "a"})


def test_to_dict(app, models, add_notes):
    Note, Author = models
    add_notes("a", author_name="alice")
    with app.app_context():
        note = Note.query.first()
        assert "author" not in to_dict(note)
        note.author
        assert to_dict(note)["author"] == {"id": 1, "name": "alice"}
        assert "author" not in to_dict(note, nested=False)

        author = Author.query.first()
        author.notes
        assert [item["title"] for item in to_dict(author)["notes"]] == ["a"]
        assert json.loads(dumps(author))["notes"][0]["date"] == "2024-01-01T10:00:00"


def test_project():
    assert project(None, {"a": 1}, lambda request, record: record["a"]) == 1
    with pytest.raises(NotFoundError) as exc_info:
        project(None, None, lambda request, record: record, identifier="x")
    assert exc_info.value.message == "x"


def test_project_list_keeps_the_order():
    assert project_list(None, [3, 1, 2], lambda request, record: record * 2) == [6, 2, 4]
