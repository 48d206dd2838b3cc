# Response shaping
from typing import Any
from flask import current_app
from .json_encoder import dumps

JSON_MIMETYPE = "application/json"


def new_response():
    """
    :return: empty flask response, headers are added while the request pipeline runs
    """
    return current_app.response_class(mimetype=JSON_MIMETYPE)


def format_body(payload: Any, options) -> Any:
    """
    :param payload: projected record(s)
    :param options: resolved Options
    :return: the payload, wrapped as {model_name: payload} for the json-api output format
    """
    if options.is_json_api:
        return {options.model_name: payload}
    return payload


def send(response, status_code: int, payload: Any, options):
    """
    Write the json body and status to the response
    """
    response.set_data(dumps(format_body(payload, options)))
    response.status_code = status_code
    return response
