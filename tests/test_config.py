"""
Tests for layered configuration.
"""

from nexaform.core.config import Config


class TestDefaults:
    def test_parsley_vocabulary(self, config):
        assert config.get("backends.parsley.attribute.prefix") == "data-parsley-"
        assert config.get("backends.parsley.attribute.default") == "type"
        assert config.get("backends.parsley.mappings.message") == "{}-message"
        assert config.get("validator.backend") == "parsley"

    def test_rule_overrides(self, config):
        assert config.get("backends.parsley.rules.RequiredRule") == {
            "attribute": "required",
            "format": "boolean",
        }
        assert config.get("backends.parsley.rules.ComparisonRule.attribute") == "$type"

    def test_without_defaults(self):
        config = Config(defaults=False)
        assert config.get("app.base_url") is None
        assert config.get("app.base_url", "fallback") == "fallback"


class TestSources:
    def test_init_data_merges_over_defaults(self):
        config = Config({"backends": {"parsley": {"attribute": {"prefix": "data-x-"}}}})

        assert config.get("backends.parsley.attribute.prefix") == "data-x-"
        assert config.get("backends.parsley.attribute.default") == "type"

    def test_env_overrides(self, config):
        config.load_env({
            "NEXAFORM_VALIDATOR__SERVER_SIDE": "false",
            "NEXAFORM_APP__BASE_URL": "https://example.org/",
            "NEXAFORM_BACKENDS__PARSLEY__TRIGGER_ON": '["change", "keyup"]',
            "OTHER_SETTING": "ignored",
        })

        assert config.get_bool("validator.server_side", True) is False
        assert config.get("app.base_url") == "https://example.org/"
        assert config.get("backends.parsley.trigger_on") == ["change", "keyup"]
        assert not config.has("other_setting")

    def test_runtime_set_wins(self, config):
        config.load_env({"NEXAFORM_APP__BASE_URL": "https://env.example/"})
        config.set("app.base_url", "https://runtime.example/")

        assert config["app.base_url"] == "https://runtime.example/"

    def test_runtime_set_merges_nested_dicts(self, config):
        config.set("backends.parsley.rules.RangeRule", {"format": "{min}-{max}"})

        assert config.get("backends.parsley.rules.RangeRule") == {
            "attribute": "range",
            "format": "{min}-{max}",
        }

    def test_load_from_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NEXAFORM_ENV", "testing")
        (tmp_path / "app.py").write_text(
            'config = {"app": {"base_url": "https://app.example/"}}\n'
        )
        (tmp_path / "testing.py").write_text('validator = {"client_side": False}\n')

        config = Config().load_from_path(tmp_path)

        assert config.get("app.base_url") == "https://app.example/"
        assert config.get_bool("validator.client_side", True) is False
        assert config.get_bool("validator.server_side") is True

    def test_get_list(self, config):
        assert config.get_list("backends.parsley.trigger_on") == ["change"]
        assert config.get_list("missing.key") == []
