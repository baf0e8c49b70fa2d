import pytest

from codefixer.utils.code_blocks import CSHARP, extract_code_block, language_for_file


@pytest.mark.parametrize(
    "path,name,tag",
    [
        ("Program.cs", "C#", "csharp"),
        ("/src/app/main.PY", "Python", "python"),
        ("view.xaml", "XAML", "xml"),
        ("script.lua", "lua", "lua"),
        ("Makefile", "text", "text"),
    ],
)
def test_language_for_file(path, name, tag):
    profile = language_for_file(path)
    assert profile.name == name
    assert profile.primary_tag == tag


def test_extracts_inner_text_after_tag_whitespace():
    reply = "Fixed:\n```csharp\n\n  class A { }\n```\nDone."
    assert extract_code_block(reply, CSHARP) == "class A { }\n"


def test_block_may_span_many_lines():
    code = "using System;\n\nclass A\n{\n    void M() { }\n}\n"
    assert extract_code_block(f"```csharp\n{code}```", CSHARP) == code


def test_returns_none_without_tagged_block():
    assert extract_code_block("No errors found.", CSHARP) is None
    assert extract_code_block("```\nclass A {}\n```", CSHARP) is None
    assert extract_code_block("```python\nx = 1\n```", CSHARP) is None


def test_unterminated_block_is_not_a_match():
    assert extract_code_block("```csharp\nclass A {", CSHARP) is None


def test_first_block_wins():
    reply = "```csharp\nfirst\n```\n```csharp\nsecond\n```"
    assert extract_code_block(reply, CSHARP) == "first\n"


@pytest.mark.parametrize("tag", ["cs", "c#", "CSharp"])
def test_alias_tags_accepted(tag):
    assert extract_code_block(f"```{tag}\nclass A {{}}\n```", CSHARP) == "class A {}\n"


def test_short_tag_does_not_match_longer_language():
    c = language_for_file("main.c")
    assert extract_code_block("```cpp\nint main() {}\n```", c) is None
    assert extract_code_block("```c\nint main() {}\n```", c) == "int main() {}\n"
