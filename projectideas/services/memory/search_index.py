"""
In-memory implementation of SearchIndex.

Matches case-insensitive word tokens of the query against the title (ideas)
or name (projects, tags) of indexed documents. Documents matching more
query tokens rank first; ties keep indexing order. This is enough for
tests and local runs, not a relevance engine.
"""

import logging
import re
from typing import Dict, List, Set

from projectideas.domain import DocumentPage, RootDocument

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"\w+")


def _tokenize(text: str) -> Set[str]:
    return {token.lower() for token in _TOKEN.findall(text)}


def searchable_text(document: RootDocument) -> str:
    for field_name in ("title", "name"):
        value = getattr(document, field_name, None)
        if isinstance(value, str):
            return value
    return ""


class MemorySearchIndex:
    """Token matching index kept in a dictionary."""

    def __init__(self, name: str = "memory") -> None:
        self.name = name
        self._tokens: Dict[str, Set[str]] = {}

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)

    async def index(self, document: RootDocument) -> None:
        logger.debug(
            "MemorySearchIndex: Indexing document",
            extra={"index": self.name, "document_id": document.id},
        )
        self._tokens[document.id] = _tokenize(searchable_text(document))

    async def update(self, document: RootDocument) -> None:
        logger.debug(
            "MemorySearchIndex: Updating document",
            extra={"index": self.name, "document_id": document.id},
        )
        self._tokens[document.id] = _tokenize(searchable_text(document))

    async def delete(self, document_id: str) -> None:
        logger.debug(
            "MemorySearchIndex: Deleting document",
            extra={"index": self.name, "document_id": document_id},
        )
        self._tokens.pop(document_id, None)

    async def search(
        self, query: str, page_number: int, page_size: int
    ) -> DocumentPage[str]:
        if page_number < 1:
            return DocumentPage(documents=[], last_page=False)

        wanted = _tokenize(query)
        scored = [
            (len(wanted & tokens), document_id)
            for document_id, tokens in self._tokens.items()
        ]
        # sorted() is stable, so equal scores keep indexing order
        matches: List[str] = [
            document_id
            for score, document_id in sorted(
                scored, key=lambda pair: -pair[0]
            )
            if score > 0
        ]

        start = (page_number - 1) * page_size
        return DocumentPage(
            documents=matches[start : start + page_size],
            last_page=start + page_size >= len(matches),
        )
