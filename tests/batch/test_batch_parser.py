"""Unit tests for BatchResponseParser and boundary extraction."""

from __future__ import annotations

import pytest

from gcal_mcp.batch.parser import BatchResponseParser, SubResponse, boundary_from_content_type
from gcal_mcp.errors import BatchParseError
from tests.fakes import (
    RESPONSE_BOUNDARY,
    batch_response_text,
    error_part,
    event,
    items_part,
    sub_response_part,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def parser() -> BatchResponseParser:
    return BatchResponseParser()


class TestBoundaryFromContentType:
    def test_bare_boundary(self):
        assert boundary_from_content_type("multipart/mixed; boundary=batch_abc") == "batch_abc"

    def test_quoted_boundary(self):
        value = 'multipart/mixed; boundary="batch_a b"; charset=UTF-8'
        assert boundary_from_content_type(value) == "batch_a b"

    def test_boundary_followed_by_parameter(self):
        value = "multipart/mixed; boundary=batch_x;charset=UTF-8"
        assert boundary_from_content_type(value) == "batch_x"

    def test_missing_boundary_raises(self):
        with pytest.raises(BatchParseError, match="no multipart boundary"):
            boundary_from_content_type("application/json")

    def test_empty_header_raises(self):
        with pytest.raises(BatchParseError):
            boundary_from_content_type("")


class TestParse:
    def test_parts_are_returned_in_stream_order(self, parser: BatchResponseParser):
        text = batch_response_text(
            [
                items_part(1, event("a", date_time="2024-01-02T10:00:00Z")),
                error_part(2, 404, "Not Found"),
                items_part(3),
            ]
        )

        responses = parser.parse(text, RESPONSE_BOUNDARY)

        assert [r.status_code for r in responses] == [200, 404, 200]
        assert responses[0].body["items"][0]["id"] == "a"
        assert responses[1].body == {"error": {"code": 404, "message": "Not Found"}}
        assert responses[2].body["items"] == []

    def test_content_id_recorded_without_brackets(self, parser: BatchResponseParser):
        text = batch_response_text([items_part(1), items_part(2)])
        responses = parser.parse(text, RESPONSE_BOUNDARY)
        assert [r.content_id for r in responses] == ["response-item1", "response-item2"]

    def test_inner_headers_are_case_insensitive(self, parser: BatchResponseParser):
        text = batch_response_text([items_part(1)])
        (response,) = parser.parse(text, RESPONSE_BOUNDARY)
        assert response.headers["content-type"].startswith("application/json")
        assert response.headers["VARY"] == "Origin"

    def test_preamble_is_ignored(self, parser: BatchResponseParser):
        text = "This is a preamble.\r\n" + batch_response_text([items_part(1)])
        responses = parser.parse(text, RESPONSE_BOUNDARY)
        assert len(responses) == 1

    def test_lf_line_endings_are_accepted(self, parser: BatchResponseParser):
        text = batch_response_text(
            [items_part(1, event("x", date="2024-03-01")), error_part(2, 403, "Forbidden")]
        ).replace("\r\n", "\n")

        responses = parser.parse(text, RESPONSE_BOUNDARY)

        assert [r.status_code for r in responses] == [200, 403]
        assert responses[0].body["items"][0]["start"] == {"date": "2024-03-01"}

    def test_non_json_body_kept_as_text(self, parser: BatchResponseParser):
        part = sub_response_part(1, 500, "backend exploded", reason="Error", json_content=False)
        (response,) = parser.parse(batch_response_text([part]), RESPONSE_BOUNDARY)
        assert response.status_code == 500
        assert response.body == "backend exploded"
        assert not response.is_success

    def test_undecodable_json_body_stays_with_its_part(self, parser: BatchResponseParser):
        text = batch_response_text(
            [
                items_part(1, event("a", date="2024-01-01")),
                "Content-Type: application/http\r\n"
                "\r\n"
                "HTTP/1.1 502 Bad Gateway\r\n"
                "Content-Type: application/json\r\n"
                "\r\n"
                "<html>oops</html>",
                "Content-Type: application/http\r\n"
                "\r\n"
                "HTTP/1.1 200 OK\r\n"
                "Content-Type: application/json\r\n"
                "\r\n"
                '{"items": [}',
            ]
        )

        responses = parser.parse(text, RESPONSE_BOUNDARY)

        assert [r.status_code for r in responses] == [200, 502, 200]
        assert responses[0].body["items"][0]["id"] == "a"
        assert responses[1].body == "<html>oops</html>"
        assert responses[2].body == '{"items": [}'

    def test_json_content_type_with_empty_body(self, parser: BatchResponseParser):
        text = batch_response_text(
            [
                "Content-Type: application/http\r\n"
                "\r\n"
                "HTTP/1.1 204 No Content\r\n"
                "Content-Type: application/json\r\n"
                "\r\n"
            ]
        )
        (response,) = parser.parse(text, RESPONSE_BOUNDARY)
        assert response.status_code == 204
        assert response.body is None
        assert response.content_id is None

    def test_status_line_without_reason_phrase(self, parser: BatchResponseParser):
        text = batch_response_text(
            [
                "Content-Type: application/http\r\n"
                "\r\n"
                "HTTP/1.1 200\r\n"
                "Content-Type: text/plain\r\n"
                "\r\n"
                "ok"
            ]
        )
        (response,) = parser.parse(text, RESPONSE_BOUNDARY)
        assert response.status_code == 200
        assert response.body == "ok"


class TestParseFailures:
    def test_truncated_stream_raises(self, parser: BatchResponseParser):
        text = batch_response_text([items_part(1), items_part(2)])
        truncated = text[: text.index(f"--{RESPONSE_BOUNDARY}--")]
        with pytest.raises(BatchParseError, match="truncated"):
            parser.parse(truncated, RESPONSE_BOUNDARY)

    def test_wrong_boundary_raises(self, parser: BatchResponseParser):
        text = batch_response_text([items_part(1)])
        with pytest.raises(BatchParseError):
            parser.parse(text, "some_other_boundary")

    def test_empty_boundary_raises(self, parser: BatchResponseParser):
        with pytest.raises(BatchParseError, match="empty"):
            parser.parse("anything", "")

    def test_no_parts_raises(self, parser: BatchResponseParser):
        with pytest.raises(BatchParseError, match="no parts"):
            parser.parse(f"--{RESPONSE_BOUNDARY}--\r\n", RESPONSE_BOUNDARY)

    def test_missing_status_line_raises(self, parser: BatchResponseParser):
        text = batch_response_text(
            ["Content-Type: application/http\r\n\r\nnot-a-status-line\r\n\r\n{}"]
        )
        with pytest.raises(BatchParseError, match="no HTTP status line"):
            parser.parse(text, RESPONSE_BOUNDARY)

    def test_part_without_embedded_response_raises(self, parser: BatchResponseParser):
        text = batch_response_text(["Content-Type: application/http"])
        with pytest.raises(BatchParseError, match="no embedded HTTP response"):
            parser.parse(text, RESPONSE_BOUNDARY)

    def test_malformed_header_line_raises(self, parser: BatchResponseParser):
        text = batch_response_text(
            ["Content-Type: application/http\r\n\r\nHTTP/1.1 200 OK\r\nbroken header\r\n\r\n{}"]
        )
        with pytest.raises(BatchParseError, match="Malformed header"):
            parser.parse(text, RESPONSE_BOUNDARY)


class TestSubResponse:
    @pytest.mark.parametrize(
        ("status_code", "expected"),
        [(200, True), (204, True), (299, True), (199, False), (304, False), (404, False)],
    )
    def test_is_success(self, status_code: int, expected: bool):
        assert SubResponse(status_code=status_code).is_success is expected
