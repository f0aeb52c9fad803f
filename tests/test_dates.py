"""
Tests for date format translation.
"""

import pytest

from nexaform.validation.dates import FORMAT_MAPPINGS, to_client_format, to_server_format


class TestToServerFormat:
    @pytest.mark.parametrize(
        "client, server",
        [
            ("YYYY-MM-DD", "%Y-%m-%d"),
            ("DD/MM/YYYY", "%d/%m/%Y"),
            ("D MMM YYYY", "%d %b %Y"),
            ("dddd, MMMM D YYYY", "%A, %B %d %Y"),
            ("hh:mm A", "%I:%M %p"),
            ("YY", "%y"),
        ],
    )
    def test_translates_tokens(self, client, server):
        assert to_server_format(client) == server

    def test_brackets_are_literal(self):
        assert to_server_format("DD/MM/YYYY [at] HH:mm") == "%d/%m/%Y at %H:%M"

    def test_percent_is_escaped(self):
        assert to_server_format("D[%]") == "%d%%"


class TestToClientFormat:
    def test_translates_directives(self):
        assert to_client_format("%d/%m/%Y") == "DD/MM/YYYY"

    def test_letters_are_bracketed(self):
        assert to_client_format("%Y-%m-%dT%H:%M") == "YYYY-MM-DD[T]HH:mm"

    def test_padded_tokens_win(self):
        assert to_client_format("%H:%M:%S") == "HH:mm:ss"


def test_table_covers_common_units():
    directives = {server for server, _ in FORMAT_MAPPINGS}
    assert {"%d", "%m", "%Y", "%H", "%M", "%S"} <= directives
