import pytest

from skillforge.errors import TransformError
from skillforge.providers.encoders import QuotedFrontmatterCodec, TomlCodec, YamlFrontmatterCodec


def test_yaml_frontmatter_keeps_key_order_and_body():
    codec = YamlFrontmatterCodec("claude-code")
    text = codec.encode(
        {"description": "Find problems", "category": "diagnostic", "steps": ("Scan", "Report")},
        "Body text.\n",
    )

    assert text.startswith("---\ndescription: Find problems\ncategory: diagnostic\n")
    assert text.endswith("Body text.\n")

    metadata, body = codec.decode(text)
    assert metadata == {
        "description": "Find problems",
        "category": "diagnostic",
        "steps": ["Scan", "Report"],
    }
    assert body.strip() == "Body text."


def test_yaml_frontmatter_handles_yaml_special_characters():
    codec = YamlFrontmatterCodec("claude-code")
    description = "Fix: colors, # headings & 'quotes'"

    metadata, _ = codec.decode(codec.encode({"description": description}, "x"))

    assert metadata["description"] == description


def test_quoted_frontmatter_quotes_every_scalar():
    codec = QuotedFrontmatterCodec("codex")
    text = codec.encode({"name": "audit", "description": "It's fine"}, "Do it.")

    assert "name: 'audit'\n" in text
    assert "description: 'It''s fine'\n" in text

    metadata, body = codec.decode(text)
    assert metadata == {"name": "audit", "description": "It's fine"}
    assert body.strip() == "Do it."


def test_quoted_frontmatter_dumps_lists_as_block_yaml():
    codec = QuotedFrontmatterCodec("codex")
    text = codec.encode({"description": "d", "steps": ["Scan", "Report"]}, "")

    assert "steps:\n- Scan\n- Report\n" in text
    metadata, _ = codec.decode(text)
    assert metadata["steps"] == ["Scan", "Report"]


def test_quoted_frontmatter_rejects_multiline_scalars():
    codec = QuotedFrontmatterCodec("codex")

    with pytest.raises(TransformError) as excinfo:
        codec.encode({"description": "line one\nline two"}, "", entity_id="audit")

    assert excinfo.value.provider == "codex"
    assert excinfo.value.entity_id == "audit"


def test_toml_document_decodes_back():
    codec = TomlCodec("gemini")
    fields = {
        "description": 'Say "hello"\tnow \\ later',
        "steps": ["Scan", "Report"],
        "prompt": "Line one\n\nLine with {{args}} and \"quotes\"",
    }

    decoded = codec.decode(codec.encode(fields))

    assert decoded["description"] == fields["description"]
    assert decoded["steps"] == ["Scan", "Report"]
    assert decoded["prompt"].strip() == fields["prompt"]


def test_toml_prompt_uses_literal_block():
    text = TomlCodec("gemini").encode({"description": "d", "prompt": "C:\\path"})

    assert "prompt = '''\nC:\\path\n'''" in text


def test_toml_rejects_triple_single_quote_in_prompt():
    with pytest.raises(TransformError) as excinfo:
        TomlCodec("gemini").encode({"prompt": "bad ''' text"}, entity_id="audit")

    assert excinfo.value.entity_id == "audit"
    assert "gemini" in str(excinfo.value)



def test_toml_prompt_with_control_characters_falls_back_to_basic_string():
    codec = TomlCodec("gemini")
    prompt = "Ring \x07 bell\rdone\nnext line"

    text = codec.encode({"description": "d", "prompt": prompt})

    assert "'''" not in text
    assert "\\u0007" in text
    assert codec.decode(text)["prompt"] == prompt


def test_toml_prompt_with_crlf_stays_literal():
    codec = TomlCodec("gemini")

    text = codec.encode({"prompt": "one\r\ntwo"})

    assert text.startswith("prompt = '''\n")
    assert codec.decode(text)["prompt"].splitlines() == ["one", "two"]
