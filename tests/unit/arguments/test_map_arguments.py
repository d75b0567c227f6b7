"""Unit tests for mapping handler parameters onto the incoming message."""

import pytest

from handlergen.arguments import ArgumentBinding, BindingKind, map_arguments
from handlergen.exceptions import IgnoredParameterError, UnsupportedParameterPatternError
from handlergen.syntax import IdentPat, Path, SelfArg, StructPat, TuplePat, WildPat
from tests.fixtures.trees import ignored, param, pattern_param

PING = Path.parse("Ping")


class TestArgumentBinding:
    """Tests for ArgumentBinding construction and rendering."""

    def test_constructors(self):
        """Test the classmethod constructors set kind and field."""
        assert ArgumentBinding.context().kind is BindingKind.CONTEXT
        assert ArgumentBinding.message().kind is BindingKind.MESSAGE
        field = ArgumentBinding.project("addr")
        assert field.kind is BindingKind.FIELD
        assert field.field == "addr"

    def test_render_defaults(self):
        """Test bindings render against msg and ctx by default."""
        assert ArgumentBinding.context().render() == "ctx"
        assert ArgumentBinding.message().render() == "msg"
        assert ArgumentBinding.project("addr").render() == "msg.addr"

    def test_render_custom_names(self):
        """Test bindings render against the given parameter names."""
        binding = ArgumentBinding.project("addr")
        assert binding.render(message_param="m", context_param="c") == "m.addr"
        assert ArgumentBinding.context().render("m", "c") == "c"


class TestMapArguments:
    """Tests for map_arguments."""

    def test_receiver_is_skipped(self):
        """Test the receiver produces no binding."""
        assert map_arguments([SelfArg()], PING, method_name="start") == []

    def test_context_parameter(self):
        """Test a parameter named ctx receives the dispatch context."""
        bindings = map_arguments([SelfArg(), param("ctx", "Context<Self>")], PING, method_name="m")
        assert bindings == [ArgumentBinding.context()]

    def test_context_wins_over_type(self):
        """Test the ctx name wins even when the type is the message type."""
        bindings = map_arguments([param("ctx", "Ping")], PING, method_name="m")
        assert bindings == [ArgumentBinding.context()]

    def test_whole_message_by_type(self):
        """Test a parameter typed as the message receives the whole message."""
        bindings = map_arguments([SelfArg(), param("payload", "Ping")], PING, method_name="m")
        assert bindings == [ArgumentBinding.message()]

    def test_type_match_is_structural(self):
        """Test a differently qualified path is not the message type."""
        bindings = map_arguments([param("payload", "proto::Ping")], PING, method_name="m")
        assert bindings == [ArgumentBinding.project("payload")]

    def test_reference_to_message_is_not_the_message(self):
        """Test a reference to the message type projects a field instead."""
        bindings = map_arguments([param("payload", "&Ping")], PING, method_name="m")
        assert bindings == [ArgumentBinding.project("payload")]

    def test_field_projection(self):
        """Test any other parameter reads the message field of the same name."""
        envelope = Path.parse("Envelope")
        bindings = map_arguments([SelfArg(), param("addr", "String")], envelope, method_name="recv")
        assert bindings == [ArgumentBinding.project("addr")]
        assert bindings[0].render() == "msg.addr"

    def test_order_follows_declaration(self):
        """Test bindings keep parameter order."""
        inputs = [
            SelfArg(),
            param("addr", "String"),
            param("ctx", "Context<Self>"),
            param("msg", "Ping"),
            param("port", "u16"),
        ]
        bindings = map_arguments(inputs, PING, method_name="m")
        assert bindings == [
            ArgumentBinding.project("addr"),
            ArgumentBinding.context(),
            ArgumentBinding.message(),
            ArgumentBinding.project("port"),
        ]

    def test_length_is_parameter_count_without_receiver(self):
        """Test one binding per non-receiver parameter."""
        inputs = [SelfArg(), param("a", "u8"), param("b", "u8"), param("c", "u8")]
        assert len(map_arguments(inputs, PING, method_name="m")) == len(inputs) - 1

    def test_ctx_in_any_position(self):
        """Test ctx is recognized wherever it appears."""
        for position in range(3):
            inputs = [param("a", "u8"), param("b", "u8")]
            inputs.insert(position, param("ctx", "Context<Self>"))
            bindings = map_arguments(inputs, PING, method_name="m")
            assert bindings[position] == ArgumentBinding.context()

    def test_mutable_binding_projects_its_name(self):
        """Test `mut name` projects the field called name."""
        arg = pattern_param(IdentPat(name="count", mutable=True), "u32")
        assert map_arguments([arg], PING, method_name="m") == [ArgumentBinding.project("count")]

    def test_custom_context_name(self):
        """Test the context parameter name can be changed."""
        bindings = map_arguments(
            [param("context", "Context<Self>"), param("ctx", "u8")],
            PING,
            method_name="m",
            context_name="context",
        )
        assert bindings == [ArgumentBinding.context(), ArgumentBinding.project("ctx")]

    def test_deterministic(self):
        """Test identical input maps to identical bindings."""
        inputs = [SelfArg(), param("ctx", "Context<Self>"), param("msg", "Ping")]
        assert map_arguments(inputs, PING, method_name="m") == map_arguments(
            inputs, PING, method_name="m"
        )


class TestMapArgumentsErrors:
    """Tests for unsupported parameters."""

    @pytest.mark.parametrize(
        "pat",
        [
            TuplePat(elems=(IdentPat(name="a"), IdentPat(name="b"))),
            StructPat(path=Path.parse("Point"), field_names=("x", "y")),
            WildPat(),
        ],
    )
    def test_destructuring_pattern(self, pat):
        """Test destructuring parameters are rejected with the pattern text."""
        with pytest.raises(UnsupportedParameterPatternError) as exc_info:
            map_arguments([SelfArg(), pattern_param(pat, "Point")], PING, method_name="moved")
        assert exc_info.value.method_name == "moved"
        assert exc_info.value.pattern == pat.render()

    def test_ignored_parameter(self):
        """Test parameters without a binding are rejected."""
        with pytest.raises(IgnoredParameterError) as exc_info:
            map_arguments([SelfArg(), ignored("u32")], PING, method_name="tick")
        assert exc_info.value.method_name == "tick"
        assert "tick" in str(exc_info.value)

    def test_error_aborts_on_first_bad_parameter(self):
        """Test the first bad parameter is the one reported."""
        inputs = [ignored("u32"), pattern_param(WildPat(), "u8")]
        with pytest.raises(IgnoredParameterError):
            map_arguments(inputs, PING, method_name="m")
