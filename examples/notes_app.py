#!/usr/bin/env python
# run:
# $ FLASK_APP=notes_app flask run
#
# $ curl -X POST -H "Content-Type: application/json" -d '{"title": "hello", "date": "2024-01-01T10:00:00"}' http://127.0.0.1:5000/api/notes
# $ curl -i "http://127.0.0.1:5000/api/notes?sort=-date&pageSize=10&populate=author"
#
import datetime
from flask import Blueprint, Flask, request
from flask_sqlalchemy import SQLAlchemy
from sqlaresource import Resource, log

db = SQLAlchemy()


class Author(db.Model):
    __tablename__ = "authors"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String, nullable=False)
    notes = db.relationship("Note", back_populates="author")


class Note(db.Model):
    __tablename__ = "notes"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String, nullable=False)
    date = db.Column(db.DateTime, nullable=False)
    content = db.Column(db.Text)
    author_id = db.Column(db.Integer, db.ForeignKey("authors.id"))
    author = db.relationship("Author", back_populates="notes")


def require_api_key():
    """
    before middleware: write operations need an X-Api-Key header
    """
    if request.method != "GET" and request.headers.get("X-Api-Key") != "secret":
        return {"message": "Unauthorized"}, 401
    return None


def summary(request, note):
    return {"id": note.id, "title": note.title, "date": note.date}


def on_insert(resource, request, record):
    log.info(f"{resource} created note {record.id}")


def create_api(app, prefix="/api"):
    api = Blueprint("api", __name__, url_prefix=prefix)
    notes = Resource(Note, page_size=20, sort="-date", list_projection=summary, before=require_api_key)
    notes.subscribe("insert", on_insert)
    notes.serve("/notes", api)
    Resource(Author, output_format="json-api").serve("/authors", api)
    app.register_blueprint(api)


def create_app():
    app = Flask("notes_app")
    app.config.update(SQLALCHEMY_DATABASE_URI="sqlite:///notes_app.sqlitedb", DEFAULT_PAGE_SIZE=50)
    db.init_app(app)
    create_api(app)
    with app.app_context():
        db.create_all()
        if not Note.query.first():
            author = Author(name="Jane")
            db.session.add(Note(title="Welcome", date=datetime.datetime.now(), author=author))
            db.session.commit()
    return app


app = create_app()

if __name__ == "__main__":
    app.run()
