"""
Tests for the environment parsing helpers.
"""

import embedder.utils.env as env


class TestEnvHelpers:
    def test_inline_comment_is_stripped(self, monkeypatch):
        monkeypatch.setenv("FOLLOWUP_IMAGE_LIMIT", "4  # extra images")
        assert env.get_int("FOLLOWUP_IMAGE_LIMIT", 2) == 4

    def test_invalid_number_falls_back(self, monkeypatch):
        monkeypatch.setenv("FETCH_TIMEOUT_S", "soon")
        assert env.get_float("FETCH_TIMEOUT_S", 15.0) == 15.0

    def test_unset_string_uses_default(self, monkeypatch):
        monkeypatch.delenv("WEBHOOK_NAME", raising=False)
        assert env.get_str("WEBHOOK_NAME", "Link Embedder") == "Link Embedder"

    def test_only_typed_getters_in_use_are_exported(self):
        getters = sorted(name for name in vars(env) if name.startswith("get_"))
        assert getters == ["get_float", "get_int", "get_str"]
