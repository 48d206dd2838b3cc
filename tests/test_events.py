from http import HTTPStatus

import pytest


@pytest.fixture
def received(notes):
    """
    :return: list of (event, kwargs) tuples, collected for every event of the notes resource
    """
    result = []

    def receiver_for(event):
        def receiver(sender, **kwargs):
            assert sender is notes
            result.append((event, kwargs))

        return receiver

    for event in ("query", "detail", "insert", "update", "remove"):
        notes.subscribe(event, receiver_for(event))
    return result


def test_insert_event(client, received):
    client.post("/notes", json={"title": "a", "date": "2024-01-01"})
    ((event, kwargs),) = received
    assert event == "insert"
    assert kwargs["record"].title == "a"
    assert kwargs["request"].method == "POST"


def test_query_event(client, add_notes, received):
    add_notes("a", "b")
    client.get("/notes")
    ((event, kwargs),) = received
    assert event == "query"
    assert [note.title for note in kwargs["records"]] == ["a", "b"]


def test_detail_update_remove_events(client, add_notes, received):
    (note_id,) = add_notes("a")
    client.get(f"/notes/{note_id}")
    client.patch(f"/notes/{note_id}", json={"title": "b"})
    client.delete(f"/notes/{note_id}")
    assert [event for event, kwargs in received] == ["detail", "update", "remove"]
    assert received[1][1]["record"].title == "b"


def test_request_outlives_the_request_context(client, notes):
    requests = []
    notes.subscribe("detail", lambda sender, request, record: requests.append(request))
    client.post("/notes", json={"title": "a", "date": "2024-01-01"})
    client.get("/notes/1?select=title")
    (request,) = requests
    assert request.method == "GET"
    assert request.path == "/notes/1"
    assert request.args["select"] == "title"


def test_no_event_on_failure(client, received):
    assert client.get("/notes/1").status_code == HTTPStatus.NOT_FOUND
    assert client.post("/notes", json={}).status_code == HTTPStatus.BAD_REQUEST
    assert client.patch("/notes/1", json={"title": "b"}).status_code == HTTPStatus.NOT_FOUND
    assert client.get("/notes?q=[").status_code == HTTPStatus.BAD_REQUEST
    assert received == []


def test_unsubscribe(client, notes):
    calls = []
    subscription = notes.subscribe("insert", lambda sender, **kwargs: calls.append(kwargs["record"].title))
    assert subscription.event == "insert"

    client.post("/notes", json={"title": "a", "date": "2024-01-01"})
    notes.unsubscribe(subscription)
    client.post("/notes", json={"title": "b", "date": "2024-01-01"})
    assert calls == ["a"]


def test_several_subscribers(client, notes):
    calls = []
    notes.subscribe("insert", lambda sender, **kwargs: calls.append(1))
    notes.subscribe("insert", lambda sender, **kwargs: calls.append(2))
    client.post("/notes", json={"title": "a", "date": "2024-01-01"})
    assert sorted(calls) == [1, 2]


def test_unknown_event(notes):
    with pytest.raises(ValueError):
        notes.subscribe("create", lambda sender, **kwargs: None)
    with pytest.raises(ValueError):
        notes.emit("create", None)
