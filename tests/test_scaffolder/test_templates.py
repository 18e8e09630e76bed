"""Tests for the Jinja2 template renderer."""

from __future__ import annotations

import pytest
from jinja2 import TemplateNotFound, UndefinedError

from appforge.scaffolder.templates import TemplateRenderer

pytestmark = pytest.mark.unit


class TestRenderer:
    def test_default_template_dir_exists(self, renderer):
        assert renderer.template_dir.is_dir()

    def test_list_templates(self, renderer):
        templates = renderer.list_templates()
        assert "frontend/App.tsx.j2" in templates
        assert "backend/index.js.j2" in templates
        assert templates == sorted(templates)

    def test_list_templates_prefix(self, renderer):
        pages = renderer.list_templates("frontend/pages")
        assert pages == [
            "frontend/pages/landing.tsx.j2",
            "frontend/pages/login.tsx.j2",
            "frontend/pages/overview.tsx.j2",
            "frontend/pages/placeholder.tsx.j2",
            "frontend/pages/register.tsx.j2",
        ]
        assert renderer.list_templates("nope") == []

    def test_missing_template(self, renderer):
        with pytest.raises(TemplateNotFound):
            renderer.render("frontend/missing.j2", {})

    def test_undefined_variable_raises(self, renderer):
        with pytest.raises(UndefinedError):
            renderer.render_string("{{ missing }}", {})

    def test_render_map_preserves_order(self, renderer):
        out = renderer.render_map(
            {"b.txt": "deploy/netlify.toml.j2", "a.txt": "deploy/vercelignore.j2"}, {}
        )
        assert list(out) == ["b.txt", "a.txt"]
        assert 'publish = "dist"' in out["b.txt"]

    def test_custom_template_dir(self, tmp_path):
        (tmp_path / "hello.j2").write_text("Hello {{ name | pascal_case }}\n", encoding="utf-8")
        assert TemplateRenderer(tmp_path).render("hello.j2", {"name": "big-app"}) == "Hello BigApp\n"


class TestFilters:
    @pytest.mark.parametrize(
        "template, expected",
        [
            ("{{ 'Post Detail' | slugify }}", "post-detail"),
            ("{{ 'audit-log' | pascal_case }}", "AuditLog"),
            ("{{ 'Blog Platform' | snake_case }}", "blog_platform"),
            ("{{ 'audit_log' | camel_case }}", "auditLog"),
            ("{{ 'say \"hi\"' | js_string }}", '"say \\"hi\\""'),
            ("{{ 'a {b} <c>' | jsx_text }}", '{"a {b} <c>"}'),
        ],
    )
    def test_filters(self, renderer, template, expected):
        assert renderer.render_string(template, {}) == expected

    def test_no_html_escaping(self, renderer):
        assert renderer.render_string("{{ v }}", {"v": "<div>&"}) == "<div>&"
