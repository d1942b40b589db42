"""Tests for the package-level API backed by the default runtime."""

import pytest

import dubstash
from dubstash.runtime import default_runtime


class TestPackageApi:
    def setup_method(self):
        # Save and restore default registry state per test
        registry = default_runtime().registry
        self._templates = dict(registry.templates)
        self._data = dict(registry.data)

    def teardown_method(self):
        registry = default_runtime().registry
        registry.templates.clear()
        registry.data.clear()
        registry.templates.update(self._templates)
        registry.data.update(self._data)

    def test_compile_returns_reusable_renderer(self):
        render = dubstash.compile("Hello {{name}}!")
        assert render({"name": "<World>"}) == "Hello &lt;World&gt;!"
        assert render({"name": "again"}) == "Hello again!"

    def test_render(self):
        assert dubstash.render("{{a.b}}", {"a": {"b": "c"}}) == "c"

    def test_register_global_template(self):
        dubstash.register_global_template("ageInWords", "{{age}} years old")
        render = dubstash.compile("{{name}}, {{ageInWords /r}}")
        assert render({"name": "John Smith", "age": 35}) == "John Smith, 35 years old"

    def test_register_global_data(self):
        dubstash.register_global_data("PRODUCT_NAME", "DubStash")
        assert dubstash.compile("{{PRODUCT_NAME}}")({}) == "DubStash"

    def test_create_context(self):
        data = {"title": "T", "page": {"name": "p"}}
        ctx = dubstash.create_context(data["page"], "page", data)
        assert dubstash.compile("{{name}}/{{../title}}")(data, start_context=ctx) == "p/T"

    def test_precompile_and_load(self):
        source = dubstash.precompile("{{if x}}{{x}}{{end}}")
        assert dubstash.load_precompiled(source)({"x": 1}) == "1"

    def test_precompile_global_templates(self):
        dubstash.register_global_template("sig", "-- {{who}}")
        document = dubstash.precompile_global_templates()
        default_runtime().registry.templates.clear()
        assert "sig" in dubstash.load_global_templates(document)
        assert dubstash.compile("{{sig}}")({"who": "me"}) == "-- me"

    def test_errors_share_base_class(self):
        assert issubclass(dubstash.TemplateRecursionError, dubstash.DubStashError)
        assert issubclass(dubstash.PrecompiledFormatError, dubstash.DubStashError)

    def test_version(self):
        assert dubstash.__version__ == "1.0.0"
        assert dubstash.AST_FORMAT_VERSION == 1

    def test_undefined_exported(self):
        assert not dubstash.UNDEFINED

    def test_recursion_error_is_catchable(self):
        with pytest.raises(dubstash.DubStashError):
            dubstash.compile("{{x /r}}")({"x": "{{x /r}}"})
