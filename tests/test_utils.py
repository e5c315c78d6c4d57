import jinja2

from netcomp._utils import render, vbus

from .utils import *


class RenderTestCase(NetlistTestCase):
    def test_vbus(self):
        self.assertEqual(vbus(["w0"]), "{w0}")
        self.assertEqual(vbus(["w0", "w1", "w2"]), "{w2,w1,w0}")

    def test_render(self):
        self.assertEqual(render(r"""
            x = {{value|hex}};
            {% for name in names %}
            {{name}}
            {% endfor %}
        """, "<test>", value=255, names=["a", "b"]), "x = ff;\na\nb\n")

    def test_undefined(self):
        with self.assertRaises(jinja2.UndefinedError):
            render("{{missing}}", "<test>")

    def test_syntax_error(self):
        with self.assertRaises(jinja2.TemplateSyntaxError) as cm:
            render("{% for %}", "<test>")
        self.assertTrue(cm.exception.args[0].endswith("(at <test>:1)"))
