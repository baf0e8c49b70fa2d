from pathlib import Path
from typing import Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest

from codefixer.core.services.correction_service import (
    CorrectionService,
    build_prompt,
    truncate_content,
)
from codefixer.domain.errors import InferenceRequestError, InvalidArgumentError
from codefixer.domain.interfaces.ai_model import InferenceModel
from codefixer.domain.models.analysis import CorrectionStatus, ModelResponse
from codefixer.domain.models.common import FilePath
from codefixer.infrastructure.filesystem.local_fs import LocalFileSystem
from codefixer.utils.code_blocks import CSHARP, language_for_file

FIXED = "public class B\n{\n    void M() { }\n}\n"


@pytest.fixture
def mock_ai_model():
    mock = MagicMock(spec=InferenceModel)
    mock.model = "codellama"
    mock.generate = AsyncMock(return_value=ModelResponse(response="No issues found."))
    return mock


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "output"


def _service(ai_model, ui, max_chars=10000) -> CorrectionService:
    return CorrectionService(ai_model=ai_model, file_system=LocalFileSystem(), ui=ui, max_chars=max_chars)


def _write(tmp_path: Path, name: str, content: str) -> FilePath:
    path = tmp_path / "src" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return FilePath(str(path))


def test_truncate_content():
    assert truncate_content("abcdef", 10) == "abcdef"
    assert truncate_content("abcdef", 6) == "abcdef"
    assert truncate_content("abcdef", 4) == "abcd"


def test_build_prompt_names_file_and_language():
    prompt = build_prompt("Program.cs", "class P {}", CSHARP)

    assert "C# static analyzer" in prompt
    assert "'Program.cs'" in prompt
    assert "```csharp\nclass P {}\n```" in prompt


def test_build_prompt_keeps_braces_and_indentation_of_code():
    code = "def f():\n    return {'a': 1}\n"
    prompt = build_prompt("f.py", code, language_for_file("f.py"))

    assert "```python\n" + code in prompt


def test_non_positive_budget_rejected(mock_ai_model, mock_ui):
    with pytest.raises(InvalidArgumentError):
        _service(mock_ai_model, mock_ui, max_chars=0)


@pytest.mark.asyncio
async def test_fenced_reply_written_verbatim(mock_ai_model, mock_ui, tmp_path, output_dir):
    source = _write(tmp_path, "B.cs", "public class B { void M() { } ")
    reply = f"The closing brace is missing.\n\n```csharp\n{FIXED}```\n\nThat should compile."
    mock_ai_model.generate.return_value = ModelResponse(response=f"  {reply}\n")

    report = await _service(mock_ai_model, mock_ui).request_corrections([source], FilePath(str(output_dir)))

    assert len(report.records) == 1
    record = report.records[0]
    assert record.status is CorrectionStatus.CORRECTED
    assert record.file_path == str(output_dir / "B.cs")
    assert record.source_path == source
    assert record.analyzed_result == reply
    assert (output_dir / "B.cs").read_bytes() == FIXED.encode("utf-8")


@pytest.mark.asyncio
async def test_reply_without_fence_creates_record_but_no_file(mock_ai_model, mock_ui, tmp_path, output_dir):
    source = _write(tmp_path, "A.cs", "public class A { }")
    mock_ai_model.generate.return_value = ModelResponse(response="No errors found.")

    report = await _service(mock_ai_model, mock_ui).request_corrections([source], FilePath(str(output_dir)))

    assert len(report.records) == 1
    record = report.records[0]
    assert record.status is CorrectionStatus.NO_CORRECTION
    assert record.analyzed_result == "No errors found."
    assert not Path(record.file_path).exists()
    assert report.corrected_records == []


@pytest.mark.asyncio
async def test_only_first_fenced_block_is_used(mock_ai_model, mock_ui, tmp_path, output_dir):
    source = _write(tmp_path, "C.cs", "class C {")
    mock_ai_model.generate.return_value = ModelResponse(
        response="```csharp\nclass C { }\n```\nor alternatively\n```csharp\nclass C2 { }\n```"
    )

    await _service(mock_ai_model, mock_ui).request_corrections([source], FilePath(str(output_dir)))

    assert (output_dir / "C.cs").read_text(encoding="utf-8") == "class C { }\n"


@pytest.mark.asyncio
async def test_content_shorter_than_budget_is_sent_whole(mock_ai_model, mock_ui, tmp_path, output_dir):
    content = "x" * 50
    source = _write(tmp_path, "Short.cs", content)

    await _service(mock_ai_model, mock_ui, max_chars=100).request_corrections([source], FilePath(str(output_dir)))

    prompt = mock_ai_model.generate.call_args.args[0]
    assert "```csharp\n" + content + "\n```" in prompt


@pytest.mark.asyncio
async def test_content_longer_than_budget_sends_exactly_budget_chars(mock_ai_model, mock_ui, tmp_path, output_dir):
    content = "".join(chr(ord("a") + i % 26) for i in range(300))
    source = _write(tmp_path, "Long.cs", content)

    await _service(mock_ai_model, mock_ui, max_chars=120).request_corrections([source], FilePath(str(output_dir)))

    prompt = mock_ai_model.generate.call_args.args[0]
    assert "```csharp\n" + content[:120] + "\n```" in prompt
    assert content[:121] not in prompt


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   ", "\n\t\r\n"])
async def test_blank_file_skipped(mock_ai_model, mock_ui, tmp_path, output_dir, content):
    source = _write(tmp_path, "Empty.cs", content)

    report = await _service(mock_ai_model, mock_ui).request_corrections([source], FilePath(str(output_dir)))

    assert report.records == []
    assert report.skipped == [source]
    mock_ai_model.generate.assert_not_called()
    assert not (output_dir / "Empty.cs").exists()


@pytest.mark.asyncio
async def test_null_response_skipped(mock_ai_model, mock_ui, tmp_path, output_dir):
    source = _write(tmp_path, "A.cs", "class A {}")
    mock_ai_model.generate.return_value = ModelResponse(response=None)

    report = await _service(mock_ai_model, mock_ui).request_corrections([source], FilePath(str(output_dir)))

    assert report.records == []
    assert report.skipped == [source]
    assert report.failures == []


@pytest.mark.asyncio
async def test_failure_on_one_file_does_not_stop_batch(mock_ai_model, mock_ui, tmp_path, output_dir):
    first = _write(tmp_path, "First.cs", "class First {}")
    second = _write(tmp_path, "Second.cs", "class Second {}")
    mock_ai_model.generate.side_effect = [
        InferenceRequestError("HTTP 500 from endpoint", status_code=500),
        ModelResponse(response="Looks fine."),
    ]

    report = await _service(mock_ai_model, mock_ui).request_corrections(
        [first, second], FilePath(str(output_dir))
    )

    assert [r.source_path for r in report.records] == [second]
    assert len(report.failures) == 1
    assert report.failures[0].file_path == first
    assert "HTTP 500" in report.failures[0].error
    mock_ui.display_error.assert_called_once_with("Error analyzing First.cs: HTTP 500 from endpoint")


@pytest.mark.asyncio
async def test_unreadable_file_recorded_as_failure(mock_ai_model, mock_ui, tmp_path, output_dir):
    missing = FilePath(str(tmp_path / "src" / "Gone.cs"))
    present = _write(tmp_path, "Here.cs", "class Here {}")

    report = await _service(mock_ai_model, mock_ui).request_corrections(
        [missing, present], FilePath(str(output_dir))
    )

    assert [f.file_path for f in report.failures] == [missing]
    assert len(report.records) == 1


@pytest.mark.asyncio
async def test_records_keep_input_order(mock_ai_model, mock_ui, tmp_path, output_dir):
    names = ["Z.cs", "M.cs", "A.cs"]
    sources = [_write(tmp_path, name, f"class {name[0]} {{}}") for name in names]
    replies: Dict[str, str] = {"M.cs": "```csharp\nclass M { }\n```"}
    seen: List[str] = []

    async def fake_generate(prompt):
        for name in names:
            if f"'{name}'" in prompt:
                seen.append(name)
                return ModelResponse(response=replies.get(name, "fine"))
        raise AssertionError("prompt did not mention a file")

    mock_ai_model.generate.side_effect = fake_generate

    report = await _service(mock_ai_model, mock_ui).request_corrections(sources, FilePath(str(output_dir)))

    assert seen == names
    assert [r.file_name for r in report.records] == names
    assert [r.file_name for r in report.corrected_records] == ["M.cs"]
