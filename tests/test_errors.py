import json

import pytest

from dropbox_cli.core.errors import (
    ApiError,
    RecoverableApiError,
    error_tag,
    normalize_error,
    parse_error_body,
)


def test_error_summary_wins_over_other_fields():
    body = json.dumps({
        "error_summary": "path/not_found/..",
        "error_description": "ignored description",
        "error": {".tag": "path", "message": "ignored nested"},
    })
    err = normalize_error(body, 409)
    assert err.message == "path/not_found/.."
    assert err.status == 409
    assert err.data["error"][".tag"] == "path"


def test_description_used_without_summary():
    body = json.dumps({"error": "invalid_grant", "error_description": "refresh token is malformed"})
    assert normalize_error(body, 400).message == "refresh token is malformed"


def test_nested_message_used_without_top_level_fields():
    body = json.dumps({"error": {"message": "nested problem"}})
    assert normalize_error(body, 500).message == "nested problem"


def test_unparseable_body_uses_raw_text():
    err = normalize_error("Error in call to API function \"files/list_folder\"", 400)
    assert err.message == "Error in call to API function \"files/list_folder\""
    assert err.data == {"error": "Error in call to API function \"files/list_folder\""}


def test_json_without_known_fields_falls_back_to_raw_text():
    assert normalize_error('{"foo": 1}', 500).message == '{"foo": 1}'


@pytest.mark.parametrize("fallback", ["API request failed", "Download failed", "Upload failed"])
def test_empty_body_uses_call_site_fallback(fallback):
    err = normalize_error("", 502, fallback)
    assert err.message == fallback
    assert err.status == 502


def test_non_object_json_is_wrapped():
    assert parse_error_body("[1, 2]") == {"error": "[1, 2]"}


def test_tag_from_nested_error():
    data = {"error_summary": "other/..", "error": {".tag": "invalid_file_extension"}}
    assert error_tag(data) == "invalid_file_extension"


def test_tag_from_summary_prefix():
    assert error_tag({"error_summary": "shared_link_already_exists/metadata/.."}) == "shared_link_already_exists"
    assert error_tag({"error": "plain text"}) is None


def test_recoverable_tags_get_their_own_class():
    body = json.dumps({"error_summary": "invalid_file_extension/..", "error": {".tag": "invalid_file_extension"}})
    err = normalize_error(body, 409)
    assert isinstance(err, RecoverableApiError)
    assert err.tag == "invalid_file_extension"

    other = normalize_error(json.dumps({"error_summary": "path/not_found/"}), 409)
    assert type(other) is ApiError
    assert other.tag == "path"


def test_to_dict_keeps_status_and_payload():
    err = normalize_error('{"error_summary": "too_many_requests/"}', 429)
    assert err.to_dict() == {
        "error": "too_many_requests/",
        "status": 429,
        "data": {"error_summary": "too_many_requests/"},
    }
