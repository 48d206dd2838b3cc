from types import SimpleNamespace

import pytest

from sqlaresource.options import JSON_API, REGULAR, Options, builtin_options, identity_projection, resolve, resource_options
from sqlaresource.settings import Settings


@pytest.fixture
def store():
    return SimpleNamespace(name="notes", primary_key="id")


def test_builtin_options(store):
    options = builtin_options(store)
    assert options.page_size == Settings.DEFAULT_PAGE_SIZE
    assert options.max_page_size == Settings.MAX_PAGE_SIZE
    assert options.model_name == "notes"
    assert options.query_string == "id"
    assert options.output_format == REGULAR
    assert options.base_url == ""
    assert options.return_removed is True
    assert options.projection("query") is identity_projection


def test_builtin_options_from_app_config(app, store):
    app.config["DEFAULT_PAGE_SIZE"] = "25"
    with app.app_context():
        assert builtin_options(store).page_size == 25


def test_call_options_win(store):
    defaults = resource_options(store, {"page_size": 20, "sort": "title"})
    options = resolve(defaults, {"page_size": 5})
    assert options.page_size == 5
    assert options.sort == "title"
    assert options.model_name == "notes"


def test_none_values_are_ignored(store):
    defaults = resource_options(store, {"page_size": 20})
    assert resolve(defaults, {"page_size": None}).page_size == 20


def test_resolve_does_not_mutate(store):
    defaults = resource_options(store, {"page_size": 20})
    call_options = {"page_size": 5}
    resolve(defaults, call_options)
    assert defaults.page_size == 20
    assert call_options == {"page_size": 5}
    with pytest.raises(AttributeError):
        defaults.page_size = 1


def test_projection_shortcut(store):
    def projection(request, record):
        return "projected"

    defaults = resource_options(store)
    options = resolve(defaults, {"projection": projection}, "detail")
    assert options.detail_projection is projection
    assert options.list_projection is identity_projection
    # remove has no projection
    assert resolve(defaults, {"projection": projection}, "remove") == defaults


def test_unknown_options_are_ignored(store):
    defaults = resource_options(store)
    assert resolve(defaults, {"colour": "red"}) == defaults


def test_global_projection_seeds_unset_projections(store):
    def global_projection(request, record):
        return "global"

    def insert_projection(request, record):
        return "insert"

    options = resource_options(store, {"global_projection": global_projection, "insert_projection": insert_projection})
    assert options.list_projection is global_projection
    assert options.detail_projection is global_projection
    assert options.update_projection is global_projection
    assert options.insert_projection is insert_projection


def test_output_format(store):
    assert resource_options(store, {"output_format": JSON_API}).is_json_api
    assert not resource_options(store).is_json_api


def test_options_defaults():
    options = Options()
    assert options.before == ()
    assert options.after == ()
    assert options.filter is None
    assert options.before_save(None, None) is None


def test_unknown_output_format_is_dropped(store):
    defaults = resource_options(store, {"output_format": JSON_API})
    assert resolve(defaults, {"output_format": "xml"}).output_format == JSON_API
    assert resource_options(store, {"output_format": "xml"}).output_format == REGULAR
