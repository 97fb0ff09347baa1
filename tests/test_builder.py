"""Tests for Builder - the immutable initializer generator.

Tests verify that:
- Every operation returns a new builder and leaves the old one untouched
- define runs plugins in registration order and collects fragments
- Plugin registration is idempotent
- apply installs readers, __init__ and the after-initialize hook
- Re-applying replaces previously generated members
"""

import inspect

import pytest

from declarative_init import (
    DEFAULT_PLUGINS,
    Assignment,
    Builder,
    Callback,
    DuplicateParameterError,
    TypeCheck,
)


def make_target():
    class Target:
        pass
    return Target


class TestBuilderCreation:

    def test_empty_builder(self):
        builder = Builder()
        assert len(builder.signature) == 0
        assert builder.plugins == DEFAULT_PLUGINS
        assert builder.parts == ()
        assert builder.tolerant is False

    def test_repr(self):
        builder = Builder().define("foo", {}).define("bar", {"option": True})
        assert repr(builder) == "Builder(params=1, options=1, plugins=3, parts=2, tolerant=False)"


class TestImmutability:

    def test_define_returns_new_builder(self):
        builder = Builder()
        defined = builder.define("foo", {})
        assert defined is not builder
        assert len(builder.signature) == 0
        assert builder.parts == ()
        assert defined.signature.names() == ("foo",)

    def test_builder_is_frozen(self):
        builder = Builder()
        with pytest.raises(AttributeError):
            builder.tolerant = True

    def test_tolerance_returns_new_builder(self):
        builder = Builder()
        tolerant = builder.tolerant_to_unknown_options()
        assert tolerant.tolerant is True
        assert builder.tolerant is False
        assert tolerant.intolerant_to_unknown_options().tolerant is False

    def test_forks_are_independent(self):
        """Two builders defined from a shared one don't see each other."""
        base = Builder().define("foo", {})
        left = base.define("left", {})
        right = base.define("right", {})
        assert left.signature.names() == ("foo", "left")
        assert right.signature.names() == ("foo", "right")
        assert base.signature.names() == ("foo",)

    def test_define_carries_plugins_and_tolerance(self):
        marker = lambda name, settings: None
        builder = Builder().register(marker).tolerant_to_unknown_options().define("foo", {})
        assert marker in builder.plugins
        assert builder.tolerant is True


class TestDefine:

    def test_fragments_in_plugin_order(self):
        builder = Builder().define("foo", {"type": int, "default": 0})
        kinds = [type(part) for part in builder.parts]
        assert kinds == [TypeCheck, Assignment, Callback]

    def test_plain_parameter_only_assigns(self):
        builder = Builder().define("foo", {})
        assert builder.parts == (Assignment("foo"),)

    def test_duplicate_raises(self):
        builder = Builder().define("foo", {})
        with pytest.raises(DuplicateParameterError):
            builder.define("foo", {})

    def test_plugins_receive_name_and_settings(self):
        seen = []

        def recorder(name, settings):
            seen.append((name, dict(settings)))
            return None

        Builder().register(recorder).define("foo", {"option": True, "doc": "x"})
        assert seen == [("foo", {"option": True, "doc": "x"})]

    def test_plugins_only_apply_to_later_definitions(self):
        calls = []
        plugin = lambda name, settings: calls.append(name)
        Builder().define("early", {}).register(plugin).define("late", {})
        assert calls == ["late"]


class TestRegister:

    def test_register_appends_plugin(self):
        plugin = lambda name, settings: None
        builder = Builder().register(plugin)
        assert builder.plugins == DEFAULT_PLUGINS + (plugin,)

    def test_register_twice_is_idempotent(self):
        """A plugin registered twice contributes one fragment per parameter."""
        def tag(name, settings):
            return Callback(name, lambda instance: None)

        once = Builder().register(tag).define("foo", {})
        twice = Builder().register(tag).register(tag).define("foo", {})
        assert len(twice.plugins) == len(once.plugins)
        assert len(twice.callbacks()) == 1

    def test_register_default_plugin_is_noop(self):
        builder = Builder()
        assert builder.register(DEFAULT_PLUGINS[0]) == builder

    def test_register_non_callable_raises(self):
        with pytest.raises(TypeError, match="Plugin must be callable"):
            Builder().register("nope")


class TestSource:

    def test_empty_source(self):
        assert Builder().source() == "def __init__(self):\n    self._after_initialize()\n"

    def test_source_layout(self):
        builder = (Builder()
                   .define("foo", {"type": int})
                   .define("bar", {"option": True, "default": None})
                   .tolerant_to_unknown_options())
        assert builder.source() == (
            "def __init__(self, foo, *, bar=__undefined__, **__options__):\n"
            "    if foo is not __undefined__:\n"
            "        foo = __check_type__('foo', __type_foo__, foo)\n"
            "    self._foo = foo\n"
            "    self._bar = bar\n"
            "    self._after_initialize()\n"
        )

    def test_tolerant_without_parameters(self):
        assert Builder().tolerant_to_unknown_options().render_parameter_list() == "**__options__"


class TestApply:

    def test_apply_returns_target(self):
        target = make_target()
        assert Builder().apply(target) is target

    def test_call_is_apply(self):
        target = make_target()
        Builder().define("foo", {})(target)
        assert target(1).foo == 1

    def test_generated_signature(self):
        target = make_target()
        Builder().define("foo", {}).define("bar", {"option": True, "default": 1}).apply(target)
        params = inspect.signature(target.__init__).parameters
        assert list(params) == ["self", "foo", "bar"]
        assert params["foo"].kind is inspect.Parameter.POSITIONAL_OR_KEYWORD
        assert params["bar"].kind is inspect.Parameter.KEYWORD_ONLY

    def test_init_metadata(self):
        target = make_target()
        Builder().apply(target)
        assert target.__init__.__qualname__.endswith("Target.__init__")
        assert target.__init__.__module__ == target.__module__

    def test_reader_is_read_only_property(self):
        target = make_target()
        Builder().define("foo", {}).apply(target)
        instance = target(1)
        assert isinstance(target.__dict__["foo"], property)
        with pytest.raises(AttributeError):
            instance.foo = 2

    def test_reader_false_skips_reader(self):
        target = make_target()
        Builder().define("foo", {"reader": False}).apply(target)
        instance = target(1)
        assert not hasattr(instance, "foo")
        assert instance._foo == 1

    def test_hook_is_installed(self):
        target = make_target()
        Builder().apply(target)
        assert callable(target.__dict__["_after_initialize"])

    def test_reapply_replaces_initializer(self):
        target = make_target()
        first = Builder().define("foo", {})
        first.apply(target)
        first.define("bar", {}).apply(target)
        instance = target(1, 2)
        assert (instance.foo, instance.bar) == (1, 2)
        with pytest.raises(TypeError):
            target(1)

    def test_apply_is_idempotent(self):
        target = make_target()
        builder = Builder().define("foo", {"default": 3})
        builder.apply(target)
        builder.apply(target)
        assert target().foo == 3
        assert target(4).foo == 4

    def test_callbacks_run_after_statements(self):
        order = []

        def tracer(name, settings):
            return Callback(name, lambda instance: order.append((name, instance._foo)))

        target = make_target()
        Builder().register(tracer).define("foo", {}).apply(target)
        target("value")
        assert order == [("foo", "value")]

    def test_describe(self):
        data = Builder().define("foo", {}).tolerant_to_unknown_options().describe()
        assert data["signature"] == "foo, **__options__"
        assert data["tolerant"] is True
        assert data["plugins"] == ["type_constraint", "variable_setter", "default_value"]
        assert data["parameters"][0]["name"] == "foo"
