"""
A small template language for XHTML pages and EPUB control documents.

Syntax:
    {{ metadata.title }}          value lookup, XML-escaped
    {{ content|raw }}             value lookup, inserted as-is
    {% if metadata.cover %} ... {% else %} ... {% endif %}
    {% if not metadata.rights %} ... {% endif %}
    {% for item in manifest %} ... {{ loop.index }} ... {% endfor %}
    {% include "navpoint.ncx" %}  render a sibling template in the current scope
    {# comment #}

Dotted paths walk mappings, attributes, and integer indexes. A path that
does not resolve is an error, never an empty string. A newline directly
after a {% %} tag is dropped so block tags on their own line leave no
blank lines behind.
"""

import os
import re
from html import escape
from xml.dom import minidom
from xml.parsers.expat import ExpatError

from makeepub.errors import TemplateError


TOKEN_RE = re.compile(r"(\{\{.*?\}\}|\{%.*?%\}\n?|\{#.*?#\}\n?)", re.DOTALL)
PATH_RE = re.compile(r"^[A-Za-z_][\w]*(\.[\w]+)*$")
FOR_RE = re.compile(r"^for\s+([A-Za-z_]\w*)\s+in\s+(\S+)$")
IF_RE = re.compile(r"^if\s+(not\s+)?(\S+)$")
INCLUDE_RE = re.compile(r"""^include\s+["']([^"']+)["']$""")

MAX_INCLUDE_DEPTH = 64

_MISSING = object()


# ── Nodes ──────────────────────────────────────────────────────────────


class Text:
    def __init__(self, text):
        self.text = text

    def render(self, template, scope, out, depth):
        out.append(self.text)


class Var:
    def __init__(self, path, raw):
        self.path = path
        self.raw = raw

    def render(self, template, scope, out, depth):
        value = template.lookup(scope, self.path)
        if value is None:
            return
        text = str(value)
        out.append(text if self.raw else escape(text, quote=True))


class If:
    def __init__(self, path, negate):
        self.path = path
        self.negate = negate
        self.body = []
        self.orelse = []

    def render(self, template, scope, out, depth):
        test = bool(template.lookup(scope, self.path))
        if self.negate:
            test = not test
        for node in self.body if test else self.orelse:
            node.render(template, scope, out, depth)


class For:
    def __init__(self, name, path):
        self.name = name
        self.path = path
        self.body = []

    def render(self, template, scope, out, depth):
        seq = template.lookup(scope, self.path)
        if seq is None:
            return
        try:
            items = list(seq)
        except TypeError:
            raise TemplateError(f"{template.name}: '{self.path}' is not iterable")

        total = len(items)
        for i, item in enumerate(items):
            inner = [{
                self.name: item,
                "loop": {"index": i + 1, "first": i == 0, "last": i == total - 1},
            }] + scope
            for node in self.body:
                node.render(template, inner, out, depth)


class Include:
    def __init__(self, name):
        self.name = name

    def render(self, template, scope, out, depth):
        if depth >= MAX_INCLUDE_DEPTH:
            raise TemplateError(f"{template.name}: include depth exceeded at '{self.name}'")
        path = os.path.join(os.path.dirname(template.path), self.name)
        child = load_template(path)
        for node in child.nodes:
            node.render(child, scope, out, depth + 1)


# ── Template ───────────────────────────────────────────────────────────


class Template:
    """
    A parsed template.

    Usage:
        tpl = load_template("theme/chapter.xhtml")
        html = tpl.render({"metadata": {...}, "content": "<p>...</p>"})
    """

    def __init__(self, source, path="<string>"):
        self.path = path
        self.name = os.path.basename(path)
        self.nodes = self._parse(source)

    def render(self, context):
        out = []
        scope = [context]
        for node in self.nodes:
            node.render(self, scope, out, 0)
        return "".join(out)

    # ── Lookup ─────────────────────────────────────────────

    def lookup(self, scope, path):
        head, *rest = path.split(".")
        value = _MISSING
        for frame in scope:
            if head in frame:
                value = frame[head]
                break
        if value is _MISSING:
            raise TemplateError(f"{self.name}: undefined variable '{path}'")

        for part in rest:
            value = _get(value, part)
            if value is _MISSING:
                raise TemplateError(f"{self.name}: undefined variable '{path}'")
        return value

    # ── Parsing ────────────────────────────────────────────

    def _parse(self, source):
        root = []
        # stack of (node, list currently being filled, tag that opened it)
        stack = []
        current = root

        for token in TOKEN_RE.split(source):
            if not token:
                continue

            if token.startswith("{#"):
                continue

            if token.startswith("{{"):
                current.append(self._parse_var(token[2:-2].strip()))
                continue

            if not token.startswith("{%"):
                current.append(Text(token))
                continue

            tag = token.rstrip("\n")[2:-2].strip()

            m = FOR_RE.match(tag)
            if m:
                self._check_path(m.group(2))
                node = For(m.group(1), m.group(2))
                current.append(node)
                stack.append((node, current, "for"))
                current = node.body
                continue

            m = IF_RE.match(tag)
            if m:
                self._check_path(m.group(2))
                node = If(m.group(2), bool(m.group(1)))
                current.append(node)
                stack.append((node, current, "if"))
                current = node.body
                continue

            m = INCLUDE_RE.match(tag)
            if m:
                current.append(Include(m.group(1)))
                continue

            if tag == "else":
                if not stack or stack[-1][2] != "if":
                    raise TemplateError(f"{self.name}: 'else' outside of 'if'")
                node = stack[-1][0]
                if current is node.orelse:
                    raise TemplateError(f"{self.name}: duplicate 'else'")
                current = node.orelse
                continue

            if tag in ("endif", "endfor"):
                opener = tag[3:]
                if not stack or stack[-1][2] != opener:
                    raise TemplateError(f"{self.name}: unexpected '{tag}'")
                _, current, _ = stack.pop()
                continue

            raise TemplateError(f"{self.name}: unknown tag '{{% {tag} %}}'")

        if stack:
            raise TemplateError(f"{self.name}: unclosed '{stack[-1][2]}' block")

        return root

    def _parse_var(self, expr):
        raw = False
        if "|" in expr:
            expr, _, flt = expr.partition("|")
            expr, flt = expr.strip(), flt.strip()
            if flt != "raw":
                raise TemplateError(f"{self.name}: unknown filter '{flt}'")
            raw = True
        self._check_path(expr)
        return Var(expr, raw)

    def _check_path(self, path):
        if not PATH_RE.match(path):
            raise TemplateError(f"{self.name}: invalid expression '{path}'")


def _get(value, part):
    if isinstance(value, dict):
        return value.get(part, _MISSING)
    if part.isdigit() and isinstance(value, (list, tuple)):
        index = int(part)
        return value[index] if index < len(value) else _MISSING
    return getattr(value, part, _MISSING)


# ── Loading ────────────────────────────────────────────────────────────


def load_template(path):
    """Read and parse a template file. Nothing is kept between calls."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            source = f.read()
    except FileNotFoundError:
        raise TemplateError(f"Template not found: {path}")
    return Template(source, path)


def render(path, context):
    """Render the template at path with context."""
    return load_template(path).render(context)


def pretty_xml(text):
    """
    Re-indent an XML document so output does not depend on template layout.

    Whitespace-only text nodes are dropped before re-serializing.
    """
    try:
        doc = minidom.parseString(text.encode("utf-8"))
    except ExpatError as e:
        raise TemplateError(f"Rendered XML is not well-formed: {e}") from e

    _strip_blank_text(doc.documentElement)
    pretty = doc.toprettyxml(indent="  ", encoding="utf-8").decode("utf-8")
    doc.unlink()
    return pretty


def _strip_blank_text(node):
    for child in list(node.childNodes):
        if child.nodeType == child.TEXT_NODE and not child.data.strip():
            node.removeChild(child)
        elif child.hasChildNodes():
            _strip_blank_text(child)
