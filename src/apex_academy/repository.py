"""In-memory index over a category-organised content tree."""

from __future__ import annotations

import hashlib
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from html import escape
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from apex_academy.errors import DuplicateSlug, MalformedDocument, RenderError
from apex_academy.ingest.frontmatter import parse_document
from apex_academy.ingest.reading_time import DEFAULT_WORDS_PER_MINUTE, estimate_reading_time, extract_excerpt
from apex_academy.models.category import CATEGORY_INFO, KIND_CATEGORIES, Category, CategoryInfo, DocumentKind
from apex_academy.models.document import Document, ReadingTime, RenderedDocument, TocEntry
from apex_academy.render.markdown import MarkdownRenderer
from apex_academy.settings import Settings

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = frozenset({".md", ".markdown"})
RENDER_ERROR_HTML = '<div class="render-error"><p>This content could not be rendered: {message}</p></div>'


@dataclass(slots=True)
class RepositoryConfig:
    root: Path
    kind: DocumentKind = DocumentKind.TOPIC
    categories: Optional[Sequence[Category]] = None
    max_workers: int = 1
    related_limit: int = 3
    words_per_minute: int = DEFAULT_WORDS_PER_MINUTE

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        self.kind = DocumentKind(self.kind)
        if self.categories is None:
            self.categories = KIND_CATEGORIES[self.kind]
        self.categories = tuple(Category(category) for category in self.categories)
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.related_limit < 0:
            raise ValueError("related_limit must not be negative")
        if self.words_per_minute <= 0:
            raise ValueError("words_per_minute must be positive")


@dataclass(frozen=True, slots=True)
class LoadFailure:
    path: Path
    error: MalformedDocument

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass(slots=True)
class LoadReport:
    documents: List[Document] = field(default_factory=list)
    failures: List[LoadFailure] = field(default_factory=list)
    duplicates: List[DuplicateSlug] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.duplicates


@dataclass(frozen=True, slots=True)
class _RenderOutcome:
    html: str
    table_of_contents: Tuple[TocEntry, ...]
    reading_time: ReadingTime
    excerpt: str


class ContentRepository:
    """Loads one document kind from disk and answers lookups over it."""

    def __init__(self, config: RepositoryConfig, *, renderer: MarkdownRenderer | None = None) -> None:
        self.config = config
        self.renderer = renderer or MarkdownRenderer()
        self._report: Optional[LoadReport] = None
        self._index: Dict[Tuple[Category, str], Document] = {}
        self._render_cache: Dict[str, _RenderOutcome] = {}

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        kind: DocumentKind = DocumentKind.TOPIC,
        *,
        renderer: MarkdownRenderer | None = None,
    ) -> "ContentRepository":
        config = RepositoryConfig(
            root=settings.content_root,
            kind=kind,
            max_workers=settings.load_workers,
            related_limit=settings.related_limit,
            words_per_minute=settings.words_per_minute,
        )
        return cls(config, renderer=renderer)

    # ------------------------------------------------------------------ loading
    def load(self) -> LoadReport:
        if self._report is None:
            self._report = self._build()
        return self._report

    def reload(self) -> LoadReport:
        self._report = None
        self._index = {}
        self._render_cache.clear()
        return self.load()

    def _build(self) -> LoadReport:
        report = LoadReport()
        jobs = list(self._enumerate())

        if self.config.max_workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                results = list(pool.map(self._parse, jobs))
        else:
            results = [self._parse(job) for job in jobs]

        index: Dict[Tuple[Category, str], Document] = {}
        for (_, path), result in zip(jobs, results):
            if isinstance(result, MalformedDocument):
                logger.warning("Skipping malformed document: %s", result)
                report.failures.append(LoadFailure(path=path, error=result))
                continue

            key = (result.category, result.slug)
            previous = index.get(key)
            if previous is not None:
                duplicate = DuplicateSlug(
                    result.category.value,
                    result.slug,
                    kept=path,
                    discarded=previous.source_path or path,
                )
                logger.warning("%s; keeping %s over %s", duplicate, duplicate.kept, duplicate.discarded)
                report.duplicates.append(duplicate)
            index[key] = result

        self._index = index
        report.documents = sorted(index.values(), key=self._display_key)
        logger.info(
            "Loaded %d %s documents from %s (%d failed, %d duplicate slugs)",
            len(report.documents),
            self.config.kind.value,
            self.config.root,
            len(report.failures),
            len(report.duplicates),
        )
        return report

    def _enumerate(self) -> Iterable[Tuple[Category, Path]]:
        root = self.config.root
        if not root.is_dir():
            logger.warning("Content root %s does not exist; the index is empty", root)
            return
        for category in self.config.categories:
            folder = root / category.value
            if not folder.is_dir():
                logger.warning("Missing category folder %s", folder)
                continue
            files = sorted(
                (path for path in folder.iterdir() if path.is_file() and path.suffix.lower() in MARKDOWN_SUFFIXES),
                key=lambda path: path.name,
            )
            for path in files:
                yield category, path

    def _parse(self, job: Tuple[Category, Path]) -> Document | MalformedDocument:
        category, path = job
        try:
            return parse_document(path, kind=self.config.kind, category=category)
        except MalformedDocument as exc:
            return exc

    # ------------------------------------------------------------------ lookups
    def get(self, category: Category | str, slug: str) -> Optional[Document]:
        self.load()
        resolved = _as_category(category)
        if resolved is None:
            return None
        return self._index.get((resolved, slug))

    def find(self, slug: str) -> Optional[Document]:
        self.load()
        for category in self.config.categories:
            document = self._index.get((category, slug))
            if document is not None:
                return document
        return None

    def list_documents(self, category: Category | str | None = None) -> List[Document]:
        self.load()
        documents: Iterable[Document] = self._index.values()
        if category is not None:
            resolved = _as_category(category)
            if resolved is None:
                return []
            documents = (document for document in documents if document.category == resolved)
        return sorted(documents, key=self._display_key)

    def latest(self, limit: int | None = None) -> List[Document]:
        documents = sorted(self.list_documents(), key=lambda document: document.slug)
        # Stable sort; undated documents ("") fall to the end.
        documents.sort(key=lambda document: document.frontmatter.last_updated or "", reverse=True)
        return documents if limit is None else documents[:limit]

    def related(self, document: Document, limit: int | None = None) -> List[Document]:
        limit = self.config.related_limit if limit is None else limit
        if limit <= 0:
            return []

        explicit = set(document.frontmatter.related_slugs)
        tags = _tags(document)
        scored: List[Tuple[Tuple[bool, int, bool], Document]] = []
        for candidate in self.list_documents():
            if candidate.key == document.key:
                continue
            same_category = candidate.category == document.category
            overlap = len(tags & _tags(candidate))
            linked = candidate.slug in explicit
            if same_category or overlap or linked:
                scored.append(((same_category, overlap, linked), candidate))

        # list_documents order breaks ties: category order, sort order, slug.
        scored.sort(key=lambda item: item[0], reverse=True)
        return [candidate for _, candidate in scored[:limit]]

    def search(self, query: str) -> List[Document]:
        """Case-insensitive substring match over title, description, tags and body."""

        needle = query.strip().lower()
        if not needle:
            return []
        return [document for document in self.list_documents() if _matches(document, needle)]

    def tags(self) -> List[str]:
        seen: Dict[str, str] = {}
        for document in self.list_documents():
            for tag in sorted(document.frontmatter.tag_set):
                seen.setdefault(tag.lower(), tag)
        return [seen[key] for key in sorted(seen)]

    def by_tag(self, tag: str) -> List[Document]:
        wanted = tag.strip().lower()
        return [document for document in self.list_documents() if wanted in _tags(document)]

    def featured(self) -> List[Document]:
        return [
            document
            for document in self.list_documents()
            if getattr(document.frontmatter, "featured", False)
        ]

    def categories(self) -> List[CategoryInfo]:
        self.load()
        counts: Dict[Category, int] = {}
        for category, _ in self._index:
            counts[category] = counts.get(category, 0) + 1
        return [CATEGORY_INFO[category].with_count(counts.get(category, 0)) for category in self.config.categories]

    # ------------------------------------------------------------------ rendering
    def render(self, document: Document) -> RenderedDocument:
        digest = hashlib.sha256(document.body.encode("utf-8")).hexdigest()
        outcome = self._render_cache.get(digest)
        if outcome is None:
            source = str(document.source_path) if document.source_path else "/".join(document.key)
            try:
                result = self.renderer.render(document.body, source=source)
            except RenderError as exc:
                logger.error("Failed to render %s/%s: %s", document.category.value, document.slug, exc)
                return RenderedDocument(
                    document=document,
                    html=RENDER_ERROR_HTML.format(message=escape(str(exc))),
                    reading_time=estimate_reading_time(document.body, self.config.words_per_minute),
                    excerpt=extract_excerpt(document.body),
                    error=str(exc),
                )
            outcome = _RenderOutcome(
                html=result.html,
                table_of_contents=tuple(result.table_of_contents),
                reading_time=estimate_reading_time(document.body, self.config.words_per_minute),
                excerpt=extract_excerpt(document.body),
            )
            self._render_cache[digest] = outcome

        return RenderedDocument(
            document=document,
            html=outcome.html,
            table_of_contents=list(outcome.table_of_contents),
            reading_time=outcome.reading_time,
            excerpt=outcome.excerpt,
        )

    def _display_key(self, document: Document) -> Tuple[int, int, str]:
        return (self._category_position(document.category), document.frontmatter.sort_order, document.slug)

    def _category_position(self, category: Category) -> int:
        try:
            return self.config.categories.index(category)
        except ValueError:
            return len(self.config.categories)


def _as_category(value: Category | str) -> Optional[Category]:
    try:
        return Category(value)
    except ValueError:
        return None


def _tags(document: Document) -> FrozenSet[str]:
    return frozenset(tag.lower() for tag in document.frontmatter.tag_set)


def _matches(document: Document, needle: str) -> bool:
    frontmatter = document.frontmatter
    fields = (frontmatter.title, frontmatter.description, *frontmatter.tag_set, document.body)
    return any(needle in text.lower() for text in fields)


__all__ = ["ContentRepository", "LoadFailure", "LoadReport", "RENDER_ERROR_HTML", "RepositoryConfig"]
