"""
Metadata encoders - one encode/decode pair per provider header format.

- YamlFrontmatterCodec: standard YAML frontmatter (Claude Code)
- QuotedFrontmatterCodec: frontmatter with every scalar single-quoted (Codex)
- TomlCodec: TOML command documents (Gemini)

Encoders raise TransformError when a value cannot be represented in the
target format. Decoders exist so every encoding can be verified by parsing
it back.
"""

import re
import tomllib
from typing import Any, Dict, Iterable, List, Optional, Tuple

import frontmatter
import yaml
from frontmatter import Post
from frontmatter.default_handlers import YAMLHandler

from skillforge.errors import TransformError


class StableYAMLHandler(YAMLHandler):
    """Frontmatter YAML handler with stable ordering and wide line width."""

    def export(self, metadata: Dict[str, Any], **kwargs: Any) -> str:
        return yaml.safe_dump(
            metadata,
            sort_keys=False,
            width=1000,
            default_flow_style=False,
            allow_unicode=True,
        ).rstrip()


_YAML_HANDLER = StableYAMLHandler()


def _plain(value: Any) -> Any:
    """Convert tuples to lists so the safe YAML dumper can represent them."""
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


def _join(header: str, body: str) -> str:
    body = body.strip()
    if body:
        return f"{header}\n\n{body}\n"
    return f"{header}\n"


class YamlFrontmatterCodec:
    """YAML frontmatter followed by a Markdown body."""

    def __init__(self, provider: str):
        self.provider = provider

    def encode(self, metadata: Dict[str, Any], body: str) -> str:
        post = Post(body.strip(), **_plain(metadata))
        text = frontmatter.dumps(post, handler=_YAML_HANDLER)
        return text.rstrip("\n") + "\n"

    def decode(self, text: str) -> Tuple[Dict[str, Any], str]:
        post = frontmatter.loads(text, handler=YAMLHandler())
        return dict(post.metadata), post.content


class QuotedFrontmatterCodec:
    """
    Frontmatter where every scalar is an explicit single-quoted string.

    Lists are dumped as block YAML. Scalars must fit on one line.
    """

    def __init__(self, provider: str):
        self.provider = provider

    def _quote(self, key: str, value: Any, entity_id: Optional[str] = None) -> str:
        value_str = "" if value is None else str(value)
        if "\n" in value_str or "\r" in value_str:
            raise TransformError(
                f"frontmatter value for '{key}' must be a single line",
                provider=self.provider,
                entity_id=entity_id,
            )
        return "'" + value_str.replace("'", "''") + "'"

    def encode(self, metadata: Dict[str, Any], body: str, entity_id: Optional[str] = None) -> str:
        lines: List[str] = ["---"]
        for key, value in metadata.items():
            if isinstance(value, (dict, list, tuple)):
                nested = yaml.safe_dump(
                    {key: _plain(value)},
                    sort_keys=False,
                    width=1000,
                    default_flow_style=False,
                    allow_unicode=True,
                ).rstrip()
                lines.extend(nested.splitlines())
                continue
            lines.append(f"{key}: {self._quote(key, value, entity_id)}")
        lines.append("---")
        return _join("\n".join(lines), body)

    def decode(self, text: str) -> Tuple[Dict[str, Any], str]:
        post = frontmatter.loads(text, handler=YAMLHandler())
        return dict(post.metadata), post.content


_TOML_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}
# Literal strings admit tab and line breaks, nothing else below 0x20
_TOML_LITERAL_FORBIDDEN_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]|\r(?!\n)")
_TOML_KEY_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class TomlCodec:
    """
    TOML writer limited to the shapes the Gemini layout needs: strings,
    booleans, arrays of strings, and literal multi-line strings for prompts.
    Prompts holding control characters a literal string cannot carry are
    written as escaped basic strings instead.
    """

    def __init__(self, provider: str, multiline_keys: Iterable[str] = ("prompt",)):
        self.provider = provider
        self.multiline_keys = frozenset(multiline_keys)

    def _basic_string(self, value: str) -> str:
        out = []
        for ch in value:
            if ch in _TOML_ESCAPES:
                out.append(_TOML_ESCAPES[ch])
            elif ord(ch) < 0x20 or ord(ch) == 0x7F:
                out.append(f"\\u{ord(ch):04X}")
            else:
                out.append(ch)
        return '"' + "".join(out) + '"'

    def _literal_block(self, key: str, value: str, entity_id: Optional[str]) -> str:
        if "'''" in value:
            raise TransformError(
                f"'{key}' contains ''' which cannot appear in a TOML literal string",
                provider=self.provider,
                entity_id=entity_id,
            )
        if _TOML_LITERAL_FORBIDDEN_RE.search(value):
            return self._basic_string(value.strip())
        return "'''\n" + value.strip() + "\n'''"

    def _value(self, key: str, value: Any, entity_id: Optional[str]) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (list, tuple)):
            return "[" + ", ".join(self._basic_string(str(v)) for v in value) + "]"
        if key in self.multiline_keys:
            return self._literal_block(key, str(value), entity_id)
        return self._basic_string("" if value is None else str(value))

    def encode(self, fields: Dict[str, Any], entity_id: Optional[str] = None) -> str:
        """Encode a flat mapping as a TOML document, keys in insertion order."""
        lines = []
        for key, value in fields.items():
            if not _TOML_KEY_RE.match(key):
                raise TransformError(f"invalid TOML key '{key}'", provider=self.provider, entity_id=entity_id)
            lines.append(f"{key} = {self._value(key, value, entity_id)}")
        return "\n".join(lines) + "\n"

    def decode(self, text: str) -> Dict[str, Any]:
        return tomllib.loads(text)
