"""
Unit tests for tag normalization.
"""

import re

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_coc_proxy.app.domain.tags import normalize_tag


UNSAFE_TAGS = ["X?limit=1", "ABC/../players", "A&B=C", "P 1 2", "A%B", "#9PJ#RJRPC", "%2523ABC"]


class TestNormalizeTag:
    """Test cases for normalize_tag."""

    @pytest.mark.parametrize("raw", ["#ABC123", "%23ABC123", "ABC123", "  #abc123 ", "%23abc123"])
    def test_equivalent_spellings(self, raw):
        assert normalize_tag(raw) == "%23ABC123"

    @pytest.mark.parametrize("raw", ["#2L0QRVR2V", "2l0qrvr2v", "%232L0QRVR2V", "##P1"] + UNSAFE_TAGS)
    def test_idempotent(self, raw):
        once = normalize_tag(raw)
        assert normalize_tag(once) == once

    @pytest.mark.parametrize("raw", UNSAFE_TAGS)
    def test_result_is_url_safe(self, raw):
        normalized = normalize_tag(raw)

        for char in "#?/& ":
            assert char not in normalized
        # Every % starts a two-digit escape produced by the encoder.
        assert re.fullmatch(r"(?:[A-Z0-9._~-]|%[0-9A-F]{2})+", normalized)

    def test_query_text_stays_in_the_segment(self):
        assert normalize_tag("X?limit=1") == "%23X%3FLIMIT%3D1"

    def test_lowercase_escape_is_decoded_before_encoding(self):
        assert normalize_tag("%61bc") == "%23ABC"
