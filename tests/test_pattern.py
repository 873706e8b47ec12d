"""Tests for waypoint.routing.pattern — path parsing and anchored matching."""

import pytest

from waypoint.errors import ConfigurationError
from waypoint.routing.pattern import compile_pattern, parse_path, strip_trailing_slash
from waypoint.routing.route import PathSegment


class TestParsePath:
    def test_literal(self) -> None:
        assert parse_path("/leads") == (PathSegment("leads"),)

    def test_brace_param(self) -> None:
        segments = parse_path("/leads/{id}/score-history")
        assert segments == (
            PathSegment("leads"),
            PathSegment("id", is_param=True),
            PathSegment("score-history"),
        )

    def test_colon_param_same_representation(self) -> None:
        assert parse_path("/leads/:id") == parse_path("/leads/{id}")

    def test_root(self) -> None:
        assert parse_path("/") == ()

    def test_trailing_slash_collapsed(self) -> None:
        assert parse_path("/leads/") == parse_path("/leads")

    def test_requires_leading_slash(self) -> None:
        with pytest.raises(ConfigurationError, match="must start with"):
            parse_path("leads")

    def test_duplicate_param_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Duplicate parameter 'id'"):
            parse_path("/leads/{id}/notes/:id")

    @pytest.mark.parametrize("path", ["/leads/{id", "/leads/id}", "/leads/{}", "/leads/:"])
    def test_malformed_params_rejected(self, path: str) -> None:
        with pytest.raises(ConfigurationError):
            parse_path(path)

    def test_rejects_angle_bracket_param(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            parse_path("/share/<slug>")
        assert "{param}" in str(exc_info.value)
        assert "/share/<slug>" in str(exc_info.value)


class TestCompiledPattern:
    def test_extracts_brace_param(self) -> None:
        pattern = compile_pattern("/leads/{id}/score-history")
        assert pattern.match("/leads/42/score-history") == {"id": "42"}

    def test_extracts_colon_param(self) -> None:
        pattern = compile_pattern("/leads/:id")
        assert pattern.match("/leads/42") == {"id": "42"}

    def test_anchored_at_end(self) -> None:
        pattern = compile_pattern("/leads/{id}")
        assert pattern.match("/leads/42/extra") is None

    def test_anchored_at_start(self) -> None:
        pattern = compile_pattern("/leads/{id}")
        assert pattern.match("/v1/leads/42") is None

    def test_param_does_not_cross_slash(self) -> None:
        pattern = compile_pattern("/files/{name}")
        assert pattern.match("/files/a/b") is None

    def test_param_requires_non_empty_segment(self) -> None:
        pattern = compile_pattern("/leads/{id}")
        assert pattern.match("/leads/") is None

    def test_literal_case_sensitive(self) -> None:
        pattern = compile_pattern("/leads")
        assert pattern.match("/Leads") is None

    def test_literal_regex_characters_escaped(self) -> None:
        pattern = compile_pattern("/index.php/leads")
        assert pattern.match("/index.php/leads") == {}
        assert pattern.match("/indexXphp/leads") is None

    def test_trailing_slash_on_request(self) -> None:
        pattern = compile_pattern("/leads")
        assert pattern.match("/leads/") == {}

    def test_empty_inner_segment_not_normalised(self) -> None:
        pattern = compile_pattern("/leads/{id}")
        assert pattern.match("/leads//7") is None

    def test_root_pattern(self) -> None:
        pattern = compile_pattern("/")
        assert pattern.match("/") == {}
        assert pattern.match("/leads") is None

    def test_multiple_params_in_declaration_order(self) -> None:
        pattern = compile_pattern("/accounts/:account_id/contacts/{contact_id}")
        assert pattern.param_names == ("account_id", "contact_id")
        assert pattern.match("/accounts/a1/contacts/c9") == {
            "account_id": "a1",
            "contact_id": "c9",
        }

    def test_param_value_kept_raw(self) -> None:
        pattern = compile_pattern("/leads/{id}")
        assert pattern.match("/leads/ABC-12%20x") == {"id": "ABC-12%20x"}


class TestStripTrailingSlash:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [("/", "/"), ("", "/"), ("/leads/", "/leads"), ("/leads", "/leads")],
    )
    def test_values(self, path: str, expected: str) -> None:
        assert strip_trailing_slash(path) == expected
