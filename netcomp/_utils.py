import textwrap

import jinja2


__all__ = ["render", "vbus"]


def vbus(names):
    """Format a list of bit names, least significant first, as a Verilog concatenation."""
    return "{" + ",".join(reversed(list(names))) + "}"


_environment = jinja2.Environment(
    trim_blocks=True, lstrip_blocks=True, undefined=jinja2.StrictUndefined)
_environment.filters["hex"] = lambda value: f"{value:x}"
_environment.filters["vbus"] = vbus


def render(source, origin, **context):
    """Render the jinja2 template ``source`` with ``context``.

    The template is dedented and stripped first, so it can be written as an indented string
    literal. Undefined variables are errors. The result ends with exactly one newline.
    """
    try:
        source   = textwrap.dedent(source).strip()
        compiled = _environment.from_string(source)
    except jinja2.TemplateSyntaxError as e:
        e.args = (f"{e.message} (at {origin}:{e.lineno})",)
        raise
    return compiled.render(context).rstrip("\n") + "\n"
