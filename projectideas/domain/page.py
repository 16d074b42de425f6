"""
Page of query results.
"""

from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class DocumentPage(BaseModel, Generic[T]):
    """One page of documents (or projected values).

    ``last_page`` is True when no further page exists. An out of range page
    request (page number below 1) is an empty page that is *not* the last
    one.
    """

    documents: List[T] = Field(default_factory=list)
    last_page: bool = False
