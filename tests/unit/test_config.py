"""Unit tests for FrameworkConfig."""

import dataclasses

import pytest

from handlergen.config import (
    DEFAULT_ALLOWED_LINTS,
    DEFAULT_CONFIG,
    DEFAULT_CONTEXT_TYPES,
    FrameworkConfig,
)


class TestFrameworkConfigDefaults:
    """Tests for the default framework names."""

    def test_default_names(self):
        """Test the defaults target actix."""
        config = FrameworkConfig()
        assert config.crate == "actix"
        assert config.handler_trait == "Handler"
        assert config.stream_trait == "StreamHandler"
        assert config.lifecycle_trait == "Actor"
        assert config.response_type == "Response"
        assert config.reply == "reply"
        assert config.reply_error == "reply_error"
        assert config.context_param == "ctx"
        assert config.message_param == "msg"
        assert config.scope_prefix == "_impl_handlers"
        assert config.context_types == DEFAULT_CONTEXT_TYPES
        assert config.allowed_lints == DEFAULT_ALLOWED_LINTS
        assert config.reject_duplicate_directives is False

    def test_default_instance(self):
        """Test DEFAULT_CONFIG holds the defaults."""
        assert DEFAULT_CONFIG == FrameworkConfig()

    def test_context_types(self):
        """Test the context types imported with the lifecycle impl."""
        assert DEFAULT_CONTEXT_TYPES == ("Context", "FramedContext")

    def test_allowed_lints(self):
        """Test the lints silenced on the scope."""
        assert DEFAULT_ALLOWED_LINTS == (
            "non_upper_case_globals",
            "unused_attributes",
            "unused_qualifications",
            "unused_variables",
            "unused_imports",
        )


class TestFrameworkConfigValidation:
    """Tests for config validation and immutability."""

    def test_frozen(self):
        """Test the config cannot be changed."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONFIG.crate = "other"  # type: ignore[misc]

    @pytest.mark.parametrize("field", ["crate", "handler_trait", "reply", "scope_prefix"])
    def test_empty_name_rejected(self, field):
        """Test empty names are rejected."""
        with pytest.raises(ValueError, match=f"FrameworkConfig.{field} must not be empty"):
            FrameworkConfig(**{field: ""})

    def test_parameter_names_must_differ(self):
        """Test ctx and msg parameter names must differ."""
        with pytest.raises(ValueError, match="must differ"):
            FrameworkConfig(context_param="msg")

    def test_empty_lints_allowed(self):
        """Test the lint list may be empty."""
        assert FrameworkConfig(allowed_lints=()).allowed_lints == ()

    def test_replace(self):
        """Test dataclasses.replace derives a new config."""
        config = dataclasses.replace(DEFAULT_CONFIG, crate="kameo")
        assert config.crate == "kameo"
        assert config.handler_trait == "Handler"
