#!/usr/bin/env python3
"""
Integration tests for the learner workflow.

Tests the complete journey:
1. Photograph a page → analysis staged
2. Pick a new book → page and vocabulary stored
3. Read the page → progress saved, resume pointer cleared
4. Practise the captured words → mastery stored
5. Sign in → collections switch to the remote store
"""

import asyncio
import random
import tempfile
from pathlib import Path

import pytest

from spanish_reader.coordinators import (
    PageIngestionCoordinator,
    ReadingFlowController,
    TrainingConfig,
    TrainingSessionEngine,
)
from spanish_reader.core import MasteryLevel, PageAnalysisResult
from spanish_reader.io import (
    AnalysisHistory,
    IdentityContext,
    InMemoryDocumentStore,
    LocalKeyValueStore,
    LocalStorageBackend,
    PersistenceGateway,
)
from spanish_reader.services import AnalysisResult, ExampleSentenceResult, PageAnalysisService

PAGE_JSON = {
    "sentences": [
        {
            "original": "María se levantó temprano.",
            "translation": "María stand früh auf.",
            "words": [
                {"word": "María", "type": "word", "category": "noun", "translation": "Maria"},
                {"word": " ", "type": "punctuation"},
                {
                    "word": "se levantó",
                    "type": "word",
                    "category": "verb",
                    "baseForm": "levantarse",
                    "tense": "Indefinido",
                    "person": "3. Person Singular",
                    "translation": "stand auf",
                    "subWords": [
                        {"word": "se", "type": "word", "category": "function"},
                        {"word": "levantó", "type": "word", "category": "verb", "baseForm": "levantar"},
                    ],
                },
                {"word": " ", "type": "punctuation"},
                {"word": "temprano", "type": "word", "category": "adjective", "translation": "früh"},
                {"word": ".", "type": "punctuation"},
            ],
        },
        {
            "original": "Voy a comer.",
            "translation": "Ich werde essen.",
            "words": [
                {"word": "Voy", "type": "word", "category": "verb", "baseForm": "ir"},
                {"word": " ", "type": "punctuation"},
                {"word": "a", "type": "word", "category": "function"},
                {"word": " ", "type": "punctuation"},
                {"word": "comer", "type": "word", "category": "verb", "baseForm": "comer"},
                {"word": ".", "type": "punctuation"},
            ],
        },
    ]
}


class CannedAnalysisService(PageAnalysisService):
    async def analyze_image(self, image_base64, api_key):
        return AnalysisResult(analysis=PageAnalysisResult.from_dict(PAGE_JSON), model="canned")

    async def generate_example_sentence(self, word, category, api_key):
        return ExampleSentenceResult("Me levanto.", "Ich stehe auf.", "canned")


@pytest.fixture
def temp_db():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "store.db"


@pytest.fixture
def app(temp_db):
    store = LocalKeyValueStore(temp_db)
    store.ensure_schema()
    identity = IdentityContext()
    gateway = PersistenceGateway(
        identity, LocalStorageBackend(store), InMemoryDocumentStore(), rng=random.Random(1)
    )
    history = AnalysisHistory(store)
    yield {
        "store": store,
        "identity": identity,
        "gateway": gateway,
        "history": history,
        "ingestion": PageIngestionCoordinator(gateway, CannedAnalysisService(), history),
    }
    store.close()


def test_full_learner_workflow(app):
    gateway = app["gateway"]
    ingestion = app["ingestion"]

    staged = asyncio.run(ingestion.analyze_and_ingest("aW1n", api_key="key"))
    assert staged.awaiting_book
    assert app["history"].get_last_analysis() is not None

    stored = asyncio.run(ingestion.assign_pending_page_to_new_book("Marianela", "Galdós"))
    assert stored.added_count == 8

    book = asyncio.run(gateway.get_book(stored.book_id))
    assert (book.title, book.author, book.page_count) == ("Marianela", "Galdós", 1)

    page = asyncio.run(gateway.list_pages(book.id))[0]

    async def read_page():
        controller = ReadingFlowController.from_page(page, gateway, history=app["history"])
        while not controller.finished:
            controller.handle_key("enter")
            await asyncio.sleep(0)
        await controller.wait_for_pending_saves()
        return controller

    controller = asyncio.run(read_page())
    assert controller.finished
    assert app["history"].get_last_analysis() is None
    assert asyncio.run(gateway.list_pages(book.id))[0].last_sentence_index == 1

    engine = TrainingSessionEngine(gateway, rng=random.Random(3))
    asyncio.run(engine.refresh_vocabulary())
    engine.start_session(TrainingConfig(categories=frozenset({"verb"}), verbs_base_form_only=True))
    practised = []
    while engine.is_active:
        practised.append(engine.current_card.word)
        engine.reveal()
        asyncio.run(engine.rate(MasteryLevel.MEDIUM))

    assert sorted(practised) == ["comer"]
    levels = {item.word: item.mastery_level for item in asyncio.run(gateway.list_vocabulary())}
    assert levels["comer"] is MasteryLevel.MEDIUM
    assert levels["se levantó"] is MasteryLevel.NEW


def test_second_scan_into_same_book_appends(app):
    gateway = app["gateway"]
    ingestion = app["ingestion"]
    book_id = asyncio.run(gateway.create_book("Marianela"))

    first = asyncio.run(ingestion.analyze_and_ingest("aW1n", book_id=book_id, api_key="key"))
    second = asyncio.run(ingestion.analyze_and_ingest("aW1n", book_id=book_id, api_key="key"))

    assert first.added_count == 8
    assert second.added_count == 0
    assert [p.page_number for p in asyncio.run(gateway.list_pages(book_id))] == [1, 2]


def test_sign_in_switches_collections(app):
    gateway = app["gateway"]
    identity = app["identity"]
    asyncio.run(app["ingestion"].analyze_and_ingest("aW1n", api_key="key"))
    asyncio.run(app["ingestion"].assign_pending_page_to_new_book("Local"))

    identity.sign_in("learner-1")
    assert asyncio.run(gateway.list_books()) == []

    remote_book = asyncio.run(gateway.create_book("Remoto"))
    asyncio.run(app["ingestion"].analyze_and_ingest("aW1n", book_id=remote_book, api_key="key"))
    assert len(asyncio.run(gateway.list_vocabulary())) == 8
    assert asyncio.run(gateway.list_pages(remote_book))[0].page_number == 1

    identity.sign_out()
    assert [b.title for b in asyncio.run(gateway.list_books())] == ["Local"]
