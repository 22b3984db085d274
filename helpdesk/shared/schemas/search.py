"""Конверт результатов поиска."""

from typing import Dict, Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class SearchResultItem(BaseModel, Generic[T]):
    value: T
    # путь поля -> текст поля с совпадениями, обёрнутыми в <em>…</em>
    highlights: Dict[str, str]


class SearchResults(BaseModel, Generic[T]):
    top_hits: List[SearchResultItem[T]]
