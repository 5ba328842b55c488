import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.services.llm import ChatGateway
from app.services.verse_store import VerseRecord, VerseStore

SAMPLE_VERSES = [
    {
        "mandala": 1,
        "hymn": 1,
        "verse": 1,
        "sanskrit": "अग्निमीळे पुरोहितं",
        "translation": "I Laud Agni, the chosen Priest.",
        "keywords": ["Priest", "sacrifice"],
        "deities": ["Agni"],
        "themes": ["Fire", "Ritual"],
    },
    {
        "mandala": 1,
        "hymn": 32,
        "verse": 1,
        "sanskrit": "इन्द्रस्य नु वीर्याणि",
        "translation": "I will declare the manly deeds of Indra.",
        "keywords": ["thunderbolt", "Vritra"],
        "deities": ["Indra"],
        "themes": ["Heroism"],
    },
    {
        "mandala": "9",
        "hymn": "1",
        "verse": "1",
        "sanskrit": "स्वादिष्ठया मदिष्ठया",
        "translation": "Flow pure, O Soma, pressed out for Indra.",
        "keywords": ["pressing"],
        "deities": ["Soma", "INDRA"],
        "themes": ["Soma Ritual"],
        "meter": "gayatri",
    },
    {
        "mandala": 10,
        "hymn": 129,
        "verse": 1,
        "sanskrit": "नासदासीन्नो सदासीत्",
        "translation": "Then was not non-existent nor existent.",
        "keywords": ["cosmogony"],
        "deities": [],
        "themes": ["Creation"],
    },
]


class StubCaller:
    """Stands in for post_with_retry and records every call."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def __call__(self, url, payload, max_attempts=3, **kwargs):
        self.calls.append({"url": url, "payload": payload, "max_attempts": max_attempts, **kwargs})
        if self.error is not None:
            raise self.error
        return self.result


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def gemini_result(text="Agni is the god of fire.", metadata=None):
    candidate = {"content": {"parts": [{"text": text}]}}
    if metadata is not None:
        candidate["groundingMetadata"] = metadata
    return {"candidates": [candidate]}


@pytest.fixture
def records():
    return [VerseRecord.model_validate(item) for item in SAMPLE_VERSES]


@pytest.fixture
def store(records):
    return VerseStore(records)


@pytest.fixture
def stub_caller():
    return StubCaller(result=gemini_result())


@pytest.fixture
def client(store, stub_caller):
    gateway = ChatGateway(api_key="test-key", api_url="https://gemini.test/generate", caller=stub_caller)
    with TestClient(create_app(verse_store=store, chat_gateway=gateway)) as test_client:
        yield test_client
