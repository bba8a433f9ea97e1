#!/usr/bin/env python3
"""
Tests for PersistenceGateway - deduplication, routing and failure policy.
"""

import asyncio
import random

import pytest

from spanish_reader.core import (
    COVER_STYLES,
    MasteryLevel,
    PageAnalysisResult,
    Sentence,
    VocabularyCandidate,
    VocabularyItem,
)
from spanish_reader.io import (
    IdentityContext,
    InMemoryDocumentStore,
    LocalKeyValueStore,
    LocalStorageBackend,
    PersistenceGateway,
)
from spanish_reader.io.local_store import VOCAB_KEY, pages_key


class FailingDocumentStore(InMemoryDocumentStore):
    """Document store whose every call raises while ``failing`` is set."""

    def __init__(self):
        super().__init__()
        self.failing = True

    def _documents(self, collection):
        if self.failing:
            raise ConnectionError("backend unavailable")
        return super()._documents(collection)


class FakeClock:
    def __init__(self, start=1000):
        self.now = start

    def __call__(self):
        self.now += 1
        return self.now


@pytest.fixture
def store():
    store = LocalKeyValueStore(":memory:")
    store.ensure_schema()
    yield store
    store.close()


@pytest.fixture
def identity():
    return IdentityContext()


@pytest.fixture
def remote():
    return InMemoryDocumentStore()


@pytest.fixture
def gateway(store, identity, remote):
    return PersistenceGateway(
        identity, LocalStorageBackend(store), remote, clock=FakeClock(), rng=random.Random(0)
    )


def _analysis() -> PageAnalysisResult:
    return PageAnalysisResult(sentences=(Sentence(original="Hola.", translation="Hallo."),))


def _candidates(*words):
    return [VocabularyCandidate(word=w, translation=w.upper()) for w in words]


class TestVocabulary:
    def test_dedup_within_batch_and_against_storage(self, gateway):
        assert asyncio.run(gateway.add_vocabulary_batch(_candidates("casa", "Casa ", "perro"))) == 2
        assert asyncio.run(gateway.add_vocabulary_batch(_candidates(" CASA", "gato"))) == 1

        words = sorted(item.word for item in asyncio.run(gateway.list_vocabulary()))
        assert words == ["casa", "gato", "perro"]

    def test_batch_shares_timestamp_and_starts_new(self, gateway):
        asyncio.run(gateway.add_vocabulary_batch(_candidates("uno", "dos")))

        items = asyncio.run(gateway.list_vocabulary())
        assert len({item.added_at for item in items}) == 1
        assert all(item.mastery_level is MasteryLevel.NEW for item in items)

    def test_blank_words_are_ignored(self, gateway):
        assert asyncio.run(gateway.add_vocabulary_batch(_candidates("  ", ""))) == 0

    def test_list_is_newest_first(self, gateway):
        asyncio.run(gateway.add_vocabulary_batch(_candidates("primero")))
        asyncio.run(gateway.add_vocabulary_batch(_candidates("segundo")))

        items = asyncio.run(gateway.list_vocabulary())
        assert [i.word for i in items] == ["segundo", "primero"]

    def test_update_and_toggle_mastery(self, gateway):
        asyncio.run(gateway.add_vocabulary_batch(_candidates("casa")))
        item_id = asyncio.run(gateway.list_vocabulary())[0].id

        asyncio.run(gateway.update_mastery_level(item_id, MasteryLevel.MEDIUM))
        assert asyncio.run(gateway.list_vocabulary())[0].mastery_level is MasteryLevel.MEDIUM

        asyncio.run(gateway.toggle_mastered(item_id))
        assert asyncio.run(gateway.list_vocabulary())[0].mastery_level is MasteryLevel.MASTERED

        asyncio.run(gateway.toggle_mastered(item_id))
        assert asyncio.run(gateway.list_vocabulary())[0].mastery_level is MasteryLevel.GOOD

    def test_remove_and_is_saved(self, gateway):
        asyncio.run(gateway.add_vocabulary_batch(_candidates("casa", "perro")))
        casa = next(i for i in asyncio.run(gateway.list_vocabulary()) if i.word == "casa")

        assert asyncio.run(gateway.is_vocabulary_saved(" CASA "))
        asyncio.run(gateway.remove_vocabulary(casa.id))

        assert not asyncio.run(gateway.is_vocabulary_saved("casa"))
        assert asyncio.run(gateway.is_vocabulary_saved("perro"))

    def test_import_keeps_ids_and_skips_known_words(self, gateway):
        asyncio.run(gateway.add_vocabulary_batch(_candidates("casa")))
        exported = [
            VocabularyItem(id="x1", word="Casa", translation="Haus", explanation="", added_at=5),
            VocabularyItem(
                id="x2",
                word="perro",
                translation="Hund",
                explanation="",
                added_at=6,
                mastery_level=MasteryLevel.GOOD,
            ),
        ]

        assert asyncio.run(gateway.import_vocabulary(exported)) == 1

        perro = next(i for i in asyncio.run(gateway.list_vocabulary()) if i.word == "perro")
        assert perro.id == "x2"
        assert perro.mastery_level is MasteryLevel.GOOD


class TestBooksAndPages:
    def test_create_book_defaults(self, gateway):
        book_id = asyncio.run(gateway.create_book("  Niebla ", author=" "))

        book = asyncio.run(gateway.get_book(book_id))
        assert book.title == "Niebla"
        assert book.author is None
        assert book.page_count == 0
        assert book.cover_style in COVER_STYLES

    def test_create_book_rejects_empty_title(self, gateway):
        with pytest.raises(ValueError):
            asyncio.run(gateway.create_book("   "))

    def test_page_numbers_follow_page_count(self, gateway):
        book_id = asyncio.run(gateway.create_book("Niebla"))
        for _ in range(3):
            asyncio.run(gateway.append_page(book_id, "img", _analysis()))

        pages = asyncio.run(gateway.list_pages(book_id))
        assert [p.page_number for p in pages] == [1, 2, 3]
        assert all(p.last_sentence_index == 0 for p in pages)
        assert asyncio.run(gateway.get_book(book_id)).page_count == 3

    def test_append_to_unknown_book_raises(self, gateway):
        with pytest.raises(ValueError, match="Unknown book"):
            asyncio.run(gateway.append_page("missing", "img", _analysis()))

    def test_update_page_progress(self, gateway):
        book_id = asyncio.run(gateway.create_book("Niebla"))
        page_id = asyncio.run(gateway.append_page(book_id, "img", _analysis()))

        asyncio.run(gateway.update_page_progress(book_id, page_id, 4))

        assert asyncio.run(gateway.list_pages(book_id))[0].last_sentence_index == 4

    def test_delete_book_removes_local_pages(self, gateway, store):
        book_id = asyncio.run(gateway.create_book("Niebla"))
        asyncio.run(gateway.append_page(book_id, "img", _analysis()))

        asyncio.run(gateway.delete_book(book_id))

        assert asyncio.run(gateway.get_book(book_id)) is None
        assert store.get_raw(pages_key(book_id)) is None

    def test_books_newest_first(self, gateway):
        asyncio.run(gateway.create_book("Primero"))
        asyncio.run(gateway.create_book("Segundo"))

        assert [b.title for b in asyncio.run(gateway.list_books())] == ["Segundo", "Primero"]


class TestRouting:
    def test_signed_out_uses_local_store(self, gateway, remote):
        asyncio.run(gateway.add_vocabulary_batch(_candidates("casa")))

        assert asyncio.run(remote.list_documents(("users", "u1", "vocabulary"))) == []

    def test_sign_in_redirects_next_call(self, gateway, identity):
        asyncio.run(gateway.add_vocabulary_batch(_candidates("local")))

        identity.sign_in("u1")
        assert asyncio.run(gateway.list_vocabulary()) == []
        asyncio.run(gateway.add_vocabulary_batch(_candidates("remoto")))
        assert [i.word for i in asyncio.run(gateway.list_vocabulary())] == ["remoto"]

        identity.sign_out()
        assert [i.word for i in asyncio.run(gateway.list_vocabulary())] == ["local"]

    def test_users_are_isolated(self, gateway, identity):
        identity.sign_in("u1")
        asyncio.run(gateway.create_book("Mío"))

        identity.sign_in("u2")
        assert asyncio.run(gateway.list_books()) == []

    def test_signed_in_without_remote_store_stays_local(self, store):
        identity = IdentityContext("u1")
        gateway = PersistenceGateway(identity, LocalStorageBackend(store))

        asyncio.run(gateway.add_vocabulary_batch(_candidates("casa")))

        assert len(asyncio.run(gateway.list_vocabulary())) == 1


class TestFailurePolicy:
    @pytest.fixture
    def failing(self):
        return FailingDocumentStore()

    @pytest.fixture
    def broken_gateway(self, store, failing):
        return PersistenceGateway(IdentityContext("u1"), LocalStorageBackend(store), failing)

    def test_reads_return_empty(self, broken_gateway):
        assert asyncio.run(broken_gateway.list_vocabulary()) == []
        assert asyncio.run(broken_gateway.list_books()) == []
        assert asyncio.run(broken_gateway.list_pages("b1")) == []
        assert asyncio.run(broken_gateway.get_book("b1")) is None

    def test_writes_are_silent(self, broken_gateway):
        assert asyncio.run(broken_gateway.add_vocabulary_batch(_candidates("casa"))) == 0
        asyncio.run(broken_gateway.update_mastery_level("v1", MasteryLevel.GOOD))
        asyncio.run(broken_gateway.remove_vocabulary_batch(["v1"]))
        asyncio.run(broken_gateway.update_page_progress("b1", "p1", 2))
        asyncio.run(broken_gateway.delete_book("b1"))

    def test_create_book_and_append_page_raise(self, broken_gateway):
        with pytest.raises(ConnectionError):
            asyncio.run(broken_gateway.create_book("Niebla"))
        with pytest.raises(ConnectionError):
            asyncio.run(broken_gateway.append_page("b1", "img", _analysis()))

    def test_recovers_when_backend_returns(self, broken_gateway, failing):
        failing.failing = False

        assert asyncio.run(broken_gateway.add_vocabulary_batch(_candidates("casa"))) == 1


def test_unknown_stored_mastery_does_not_block_vocabulary(gateway, store):
    store.set_json(
        VOCAB_KEY,
        [
            {"id": "v1", "word": "casa", "masteryLevel": "new", "addedAt": 1},
            {"id": "v2", "word": "perro", "masteryLevel": "learning", "addedAt": 2},
        ],
    )

    assert len(asyncio.run(gateway.list_vocabulary())) == 2
    assert asyncio.run(gateway.add_vocabulary_batch(_candidates("gato", "perro"))) == 1
