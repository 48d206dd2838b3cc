import datetime

import pytest
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.orm import validates

from sqlaresource import Resource

db = SQLAlchemy()


class Author(db.Model):
    __tablename__ = "authors"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    notes = db.relationship("Note", back_populates="author")


class Note(db.Model):
    __tablename__ = "notes"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(100), nullable=False)
    date = db.Column(db.DateTime, nullable=False)
    content = db.Column(db.Text)
    published = db.Column(db.Boolean, default=False)
    author_id = db.Column(db.Integer, db.ForeignKey("authors.id"))
    author = db.relationship("Author", back_populates="notes")

    @validates("title")
    def validate_title(self, key, title):
        if title == "forbidden":
            raise ValueError("This title is not allowed")
        return title


@pytest.fixture
def app():
    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
    app.config["TESTING"] = True
    db.init_app(app)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def statements(app):
    """
    :return: list of the sql statements executed by the app engine while the test runs
    """
    with app.app_context():
        engine = db.engine
    executed = []

    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        executed.append(statement)

    event.listen(engine, "before_cursor_execute", before_cursor_execute)
    yield executed
    event.remove(engine, "before_cursor_execute", before_cursor_execute)


@pytest.fixture
def models():
    return Note, Author


@pytest.fixture
def add_notes(app):
    """
    :return: function inserting notes with the given titles, returns their ids
    """

    def add(*titles, author_name=None):
        with app.app_context():
            author = Author(name=author_name) if author_name else None
            notes = [Note(title=title, date=datetime.datetime(2024, 1, i + 1, 10, 0), author=author) for i, title in enumerate(titles)]
            db.session.add_all(notes)
            db.session.commit()
            return [note.id for note in notes]

    return add


@pytest.fixture
def notes(app):
    resource = Resource(Note)
    resource.serve("/notes", app)
    return resource


@pytest.fixture
def client(app, notes):
    return app.test_client()
