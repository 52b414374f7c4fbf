import asyncio
import os

import pytest

# Keep tests away from the real user config and installed plugins
os.environ.setdefault("PROMPTASSEMBLER_SKIP_PLUGINS", "1")

from promptassembler.config.loader import reset_config_cache
from promptassembler.core.models import DynamicContent, ItemKind, PromptItem, StaticContent


class RecordingNotifier:
    def __init__(self):
        self.messages = []

    def status(self, message):
        self.messages.append(("status", message))

    def info(self, message):
        self.messages.append(("info", message))

    def warning(self, message):
        self.messages.append(("warning", message))

    def error(self, message):
        self.messages.append(("error", message))

    def of(self, level):
        return [message for lvl, message in self.messages if lvl == level]


class ScriptedTextInput:
    """Returns queued answers in order; None means the operator cancelled."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.calls = []

    async def ask(self, title, description, initial="", max_length=5000):
        self.calls.append({"title": title, "initial": initial, "max_length": max_length})
        return self.answers.pop(0) if self.answers else None


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory, monkeypatch):
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("PROMPTASSEMBLER_HOME", str(home))
    reset_config_cache()
    yield home
    reset_config_cache()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def run():
    return asyncio.run


def static_item(kind=ItemKind.USER_INSTRUCTION, text="text", **kwargs):
    return PromptItem(kind=kind, title=kwargs.pop("title", text[:20]), content=StaticContent(text), **kwargs)


def dynamic_item(kind, producer, **kwargs):
    return PromptItem(kind=kind, title=kwargs.pop("title", kind.value), content=DynamicContent(producer), **kwargs)


@pytest.fixture
def make_static():
    return static_item


@pytest.fixture
def make_dynamic():
    return dynamic_item


@pytest.fixture
def text_input_factory():
    return ScriptedTextInput
