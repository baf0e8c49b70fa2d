import json
import os
from pathlib import Path
from typing import Callable, Dict, List

import httpx
import pytest
from typer.testing import CliRunner
from unittest.mock import MagicMock

from codefixer.domain.interfaces.user_interface import UserInterface
from codefixer.infrastructure.ai.ollama.ollama_client import OllamaClient
from codefixer.infrastructure.config.settings import clear_test_config, reset_configuration

VALID_CS = """using System;

public class A
{
    public static void Main() => Console.WriteLine("ok");
}
"""

BROKEN_CS = """using System;

public class B
{
    public static void Main() { Console.WriteLine("broken") }
}
"""

FIXED_CS = """using System;

public class B
{
    public static void Main() { Console.WriteLine("broken"); }
}
"""


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def mock_ui():
    """A UserInterface sink that records every call."""
    return MagicMock(spec=UserInterface)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path: Path):
    """Keeps user config files and CODEFIXER_* variables out of the tests."""
    import codefixer.infrastructure.config.settings as settings

    for key in list(os.environ):
        if key.startswith(settings.ENV_PREFIX):
            monkeypatch.delenv(key)
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", tmp_path / "no-config.yaml")
    monkeypatch.setattr(settings, "find_dotenv_path", lambda: None)
    reset_configuration()
    clear_test_config()
    yield
    reset_configuration()
    clear_test_config()


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """A small C# project:

    project/
      A.cs, B.cs, notes.txt
      src/Util.cs
      src/Deep/Util.cs          (same base name as src/Util.cs)
      bin/Debug/Gen.cs          (excluded)
      obj/Cache.cs              (excluded)
      Objects/Model.cs          (not excluded: 'Objects' is not 'obj')
    """
    root = tmp_path / "project"
    (root / "src" / "Deep").mkdir(parents=True)
    (root / "bin" / "Debug").mkdir(parents=True)
    (root / "obj").mkdir()
    (root / "Objects").mkdir()

    (root / "A.cs").write_text(VALID_CS, encoding="utf-8")
    (root / "B.cs").write_text(BROKEN_CS, encoding="utf-8")
    (root / "notes.txt").write_text("not code", encoding="utf-8")
    (root / "src" / "Util.cs").write_text("class Util {}", encoding="utf-8")
    (root / "src" / "Deep" / "Util.cs").write_text("class DeepUtil {}", encoding="utf-8")
    (root / "bin" / "Debug" / "Gen.cs").write_text("class Gen {}", encoding="utf-8")
    (root / "obj" / "Cache.cs").write_text("class Cache {}", encoding="utf-8")
    (root / "Objects" / "Model.cs").write_text("class Model {}", encoding="utf-8")
    return root


def generate_reply(text) -> Dict:
    """A realistic non-streaming /api/generate body."""
    return {
        "model": "codellama",
        "created_at": "2024-05-01T10:00:00Z",
        "response": text,
        "done": True,
        "total_duration": 123456,
    }


@pytest.fixture
def stub_endpoint():
    """Builds an OllamaClient whose requests are answered by `replies`.

    `replies` maps a file name to the model text returned when the prompt
    mentions that file. Received payloads are appended to `requests`.
    """

    def _build(replies: Dict[str, str], requests: List[Dict] = None, **kwargs) -> OllamaClient:
        received = requests if requests is not None else []

        def handler(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            received.append(payload)
            for file_name, text in replies.items():
                if f"'{file_name}'" in payload["prompt"]:
                    return httpx.Response(200, json=generate_reply(text))
            return httpx.Response(200, json=generate_reply("No issues found."))

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return OllamaClient(http_client=http_client, **kwargs)

    return _build


@pytest.fixture
def make_transport_client() -> Callable[..., OllamaClient]:
    """Builds an OllamaClient around an arbitrary MockTransport handler."""

    def _build(handler, **kwargs) -> OllamaClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return OllamaClient(http_client=http_client, **kwargs)

    return _build
