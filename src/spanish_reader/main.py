"""Main entry point for the spanish reader command line."""

import argparse
import asyncio
import base64
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from spanish_reader.coordinators import (
    NoMatchingVocabularyError,
    PageIngestionCoordinator,
    ReadingFlowController,
    ReadingPhase,
    TrainingConfig,
    TrainingSessionEngine,
)
from spanish_reader.core import MasteryLevel
from spanish_reader.io import (
    AnalysisHistory,
    IdentityContext,
    LocalKeyValueStore,
    LocalStorageBackend,
    PersistenceGateway,
)
from spanish_reader.services import GeminiPageAnalysisService, SettingsManager
from spanish_reader.services.vocabulary_transfer import export_vocabulary, import_vocabulary

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


@dataclass
class Application:
    """Wired components shared by all commands."""

    settings: SettingsManager
    store: LocalKeyValueStore
    identity: IdentityContext
    gateway: PersistenceGateway
    history: AnalysisHistory
    ingestion: PageIngestionCoordinator
    training: TrainingSessionEngine


def build_application(settings: SettingsManager, user_id: Optional[str] = None) -> Application:
    """
    Composition root: the only place that knows how to instantiate and wire all components.
    """
    store = LocalKeyValueStore(settings.get_local_db_path())
    store.ensure_schema()
    settings.attach_session_store(store)

    remote_store = None
    project_id = settings.get_firebase_project_id()
    if project_id:
        from spanish_reader.io.firestore_document_store import FirestoreDocumentStore

        remote_store = FirestoreDocumentStore(project=project_id)

    identity = IdentityContext(user_id)
    gateway = PersistenceGateway(identity, LocalStorageBackend(store), remote_store)
    history = AnalysisHistory(store)
    ingestion = PageIngestionCoordinator(
        gateway=gateway,
        analysis_service=GeminiPageAnalysisService(),
        history=history,
        settings=settings,
    )
    return Application(
        settings=settings,
        store=store,
        identity=identity,
        gateway=gateway,
        history=history,
        ingestion=ingestion,
        training=TrainingSessionEngine(gateway),
    )


async def _scan(app: Application, image_path: Path, book_id: Optional[str], title: Optional[str]) -> int:
    image = base64.b64encode(image_path.read_bytes()).decode("ascii")
    result = await app.ingestion.analyze_and_ingest(image, book_id=book_id)
    if result.is_error:
        print(f"Analysis failed: {result.error}")
        return 1
    if result.awaiting_book:
        result = await app.ingestion.assign_pending_page_to_new_book(title)
    print(f"Page {result.page_id} stored in book {result.book_id}, {result.added_count} new words")
    return 0


async def _books(app: Application) -> int:
    for book in await app.gateway.list_books():
        author = f" - {book.author}" if book.author else ""
        print(f"{book.id}  {book.title}{author}  ({book.page_count} pages)")
    return 0


async def _vocab(app: Application) -> int:
    for item in await app.gateway.list_vocabulary():
        print(f"[{item.mastery_level.value:>8}] {item.word} = {item.translation}")
    return 0


async def _read(app: Application, book_id: str, page_number: int) -> int:
    pages = await app.gateway.list_pages(book_id)
    page = next((p for p in pages if p.page_number == page_number), None)
    if page is None:
        print(f"Book {book_id} has no page {page_number}")
        return 1

    controller = ReadingFlowController.from_page(page, app.gateway, history=app.history)
    print("Enter: next, b: back, s: skip sentence, q: quit")
    while not controller.finished:
        sentence = controller.current_sentence
        print(f"\nSentence {controller.sentence_index + 1}/{controller.sentence_count}")
        if controller.phase is ReadingPhase.SENTENCE:
            print(sentence.original)
        elif controller.phase is ReadingPhase.WORDS:
            entry = controller.current_entry
            prefix = f"  ({entry.parent_phrase}) " if entry.is_sub_word else ""
            print(f"{prefix}{entry.word.text}: {entry.word.translation or ''}")
            if entry.word.explanation:
                print(f"    {entry.word.explanation}")
        else:
            print(sentence.translation)

        command = input("> ").strip().lower()
        if command == "q":
            break
        controller.handle_key({"": "enter", "b": "left"}.get(command, command))
        # Give scheduled progress saves a chance to run between prompts.
        await asyncio.sleep(0)

    await controller.wait_for_pending_saves()
    if controller.finished:
        print("\nPage finished.")
    return 0


async def _train(app: Application, categories: List[str], levels: List[str], base_only: bool) -> int:
    engine = app.training
    await engine.refresh_vocabulary()
    config = TrainingConfig(
        categories=frozenset(categories),
        mastery_levels=frozenset(MasteryLevel(level) for level in levels),
        verbs_base_form_only=base_only,
    )
    try:
        engine.start_session(config)
    except NoMatchingVocabularyError as e:
        print(e)
        return 1

    ratings = {"1": MasteryLevel.AGAIN, "2": MasteryLevel.MEDIUM, "3": MasteryLevel.GOOD, "4": MasteryLevel.MASTERED}
    while engine.is_active:
        card = engine.current_card
        input(f"\n{card.word}  (Enter to reveal)")
        engine.reveal()
        print(f"{card.translation}\n{card.explanation}")
        choice = ""
        while choice not in ratings:
            choice = input("1 again, 2 medium, 3 good, 4 mastered > ").strip()
        await engine.rate(ratings[choice])
    print("Session finished.")
    return 0


async def _export(app: Application, path: Path) -> int:
    count = await export_vocabulary(app.gateway, path)
    print(f"Exported {count} items")
    return 0


async def _import(app: Application, path: Path) -> int:
    count = await import_vocabulary(app.gateway, path)
    print(f"Imported {count} items")
    return 0


async def _dispatch(app: Application, args: argparse.Namespace) -> int:
    if args.command == "scan":
        return await _scan(app, args.image, args.book, args.title)
    if args.command == "books":
        return await _books(app)
    if args.command == "vocab":
        return await _vocab(app)
    if args.command == "read":
        return await _read(app, args.book, args.page)
    if args.command == "train":
        defaults = TrainingConfig()
        return await _train(
            app,
            args.categories or sorted(defaults.categories),
            args.levels or [level.value for level in defaults.mastery_levels],
            args.base_forms_only,
        )
    if args.command == "export":
        return await _export(app, args.path)
    if args.command == "import":
        return await _import(app, args.path)
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Capture vocabulary from photographed Spanish book pages"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--user", help="Signed-in user id; routes storage to Firestore when configured")
    parser.add_argument("--project-root", type=Path, default=None, help="Directory holding the .env file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Analyse a page photo and store it")
    scan.add_argument("image", type=Path)
    scan.add_argument("--book", help="Existing book id; a new book is created otherwise")
    scan.add_argument("--title", help="Title of the new book")

    subparsers.add_parser("books", help="List books")
    subparsers.add_parser("vocab", help="List vocabulary")

    read = subparsers.add_parser("read", help="Walk through a stored page")
    read.add_argument("book")
    read.add_argument("page", type=int)

    train = subparsers.add_parser("train", help="Practise vocabulary")
    train.add_argument("--category", action="append", dest="categories",
                       choices=["noun", "verb", "adjective", "other"])
    train.add_argument("--level", action="append", dest="levels",
                       choices=[level.value for level in MasteryLevel])
    train.add_argument("--base-forms-only", action="store_true", help="Only infinitive verbs")

    export = subparsers.add_parser("export", help="Export vocabulary to JSON")
    export.add_argument("path", type=Path)
    imp = subparsers.add_parser("import", help="Import vocabulary from JSON")
    imp.add_argument("path", type=Path)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    app = build_application(SettingsManager(project_root=args.project_root), user_id=args.user)
    try:
        return asyncio.run(_dispatch(app, args))
    finally:
        app.store.close()


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
