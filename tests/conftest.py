from pathlib import Path
import sys

import pytest

# Ensure src/ is on sys.path for tests
SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from repairkit.config import settings  # noqa: E402
from repairkit.services.json_service import JSONRepairEngine  # noqa: E402
from repairkit.services.xml_service import XMLRepairEngine  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the global config at a file that does not exist, so defaults apply."""
    monkeypatch.setenv("REPAIRKIT_CONFIG", str(tmp_path / "missing-config.json"))
    monkeypatch.setattr(settings, "_config_instance", None)
    yield


@pytest.fixture
def json_engine():
    return JSONRepairEngine()


@pytest.fixture
def xml_engine():
    return XMLRepairEngine()


class FakeTokenizer:
    def encode(self, text):
        return list(text)

    def decode(self, ids):
        return "".join(ids)


class FakeModel:
    """Returns a canned completion and remembers how it was called."""

    def __init__(self, completion):
        self.completion = completion
        self.calls = []

    def generate(self, input_ids, max_new_tokens, temperature):
        self.calls.append(("".join(input_ids), max_new_tokens, temperature))
        return list(self.completion)


class FakeLLMClient:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.prompts = []

    def call_llm(self, system_prompt, prompt, return_raw=False):
        self.prompts.append((system_prompt, prompt, return_raw))
        if self.error:
            raise self.error
        return self.response
