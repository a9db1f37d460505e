# tests/conftest.py
import pytest

from flashrepo.utils.tokenizer import Tokenizer


@pytest.fixture(autouse=True)
def offline_tokenizer(monkeypatch):
    """Token estimates use the len // 4 fallback, no BPE download."""
    def _no_encoding(cls):
        raise RuntimeError("offline")

    monkeypatch.setattr(Tokenizer, "get_encoding", classmethod(_no_encoding))
