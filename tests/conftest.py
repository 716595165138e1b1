import os
import tempfile
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

# до импорта config/utils: хранилище по умолчанию не должно лезть в рабочую папку
os.environ.setdefault("DB_PATH", os.path.join(tempfile.mkdtemp(prefix="markovbot-"), "chains.sqlite"))

from utils.chains import ChainStore  # noqa: E402
from handlers import commands, messages  # noqa: E402


@pytest.fixture
def store(tmp_path, monkeypatch):
    s = ChainStore(str(tmp_path / "chains.sqlite"))
    monkeypatch.setattr(commands, "chains_store", s)
    monkeypatch.setattr(messages, "chains_store", s)
    return s


def make_user(uid=10, name="Ana", is_bot=False):
    return SimpleNamespace(id=uid, full_name=name, is_bot=is_bot)


def make_message(text="", uid=10, name="Ana", chat_id=1, message_id=100, reply_to=None, is_bot=False):
    return SimpleNamespace(
        text=text,
        message_id=message_id,
        chat=SimpleNamespace(id=chat_id),
        from_user=make_user(uid, name, is_bot),
        reply_to_message=reply_to,
        answer=AsyncMock(),
        edit_text=AsyncMock(),
    )


def make_callback(data, message, uid=10, name="Ana"):
    return SimpleNamespace(
        data=data,
        message=message,
        from_user=make_user(uid, name),
        answer=AsyncMock(),
    )
