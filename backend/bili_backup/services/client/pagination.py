"""
Paginators - Lazy iteration over paged platform listings

Two strategies cover every listing endpoint:

- OffsetPaginator: ``pn``/``ps`` pages with a declared total
- CursorPaginator: opaque continuation cursor plus a ``has_more`` flag

Both are generators: pages are fetched only as the caller consumes them and a
paginator cannot be restarted. A humanization pause separates consecutive
fetches, never following the final one.

Decoders turn an envelope's ``data`` into the paginator's signal so endpoints
that use other key names (``medias``, ``info.media_count``, a structured
history cursor) share the same loop.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from ...utils.logger import get_logger

logger = get_logger('pagination')

DEFAULT_MAX_ITERATIONS = 100

Cursor = Union[str, int, Dict[str, Any], None]


@dataclass(frozen=True)
class OffsetSignal:
    running_total: int
    declared_total: int


@dataclass(frozen=True)
class CursorSignal:
    next_cursor: Cursor
    has_more: bool


@dataclass
class Page:
    items: List[Any] = field(default_factory=list)
    signal: Union[OffsetSignal, CursorSignal, None] = None


def decode_offset(data: Any) -> Tuple[List[Any], int]:
    """Default offset decoder for ``{list, total}`` payloads."""
    return (data.get('list') or [], int(data.get('total') or 0))


def decode_cursor(data: Any) -> Tuple[List[Any], Cursor, bool]:
    """Default cursor decoder for ``{list, cursor, has_more}`` payloads."""
    return (data.get('list') or [], data.get('cursor'), bool(data.get('has_more')))


def _cursor_is_empty(cursor: Cursor) -> bool:
    return cursor is None or cursor == '' or cursor == {}


class OffsetPaginator:
    """Iterate ``pn``-numbered pages until the declared total is reached.

    Example:
        >>> pager = OffsetPaginator(client, FOLLOWING_LIST, {'vmid': mid}, page_size=50)
        >>> followings = pager.collect()
    """

    def __init__(
        self,
        client,
        url: str,
        params: Optional[Mapping] = None,
        page_size: int = 20,
        decode: Callable[[Any], Tuple[List[Any], int]] = decode_offset,
        max_pages: Optional[int] = None,
        signed: bool = False
    ):
        """Initialize the paginator.

        Args:
            client: Pinned ApiClient (needs ``get`` and ``humanize``)
            url: Listing endpoint
            params: Fixed query parameters, ``pn``/``ps`` are appended
            page_size: Value sent as ``ps``
            decode: Maps envelope data to ``(items, total)``
            max_pages: Optional hard page limit
            signed: Whether the endpoint requires signing
        """
        self.client = client
        self.url = url
        self.params = dict(params or {})
        self.page_size = page_size
        self.decode = decode
        self.max_pages = max_pages
        self.signed = signed
        self._started = False

    def pages(self) -> Iterator[Page]:
        if self._started:
            raise RuntimeError('paginator already consumed')
        self._started = True

        page_number = 1
        running_total = 0
        while True:
            params = dict(self.params, pn=page_number, ps=self.page_size)
            data = self.client.get(self.url, params, signed=self.signed)
            if data is None:
                return
            items, total = self.decode(data)
            if not items:
                return

            running_total += len(items)
            yield Page(items=list(items), signal=OffsetSignal(running_total, total))

            if running_total >= total:
                return
            if self.max_pages is not None and page_number >= self.max_pages:
                logger.debug(f"[OffsetPaginator] page limit {self.max_pages} reached: {self.url}")
                return

            page_number += 1
            self.client.humanize()

    def __iter__(self) -> Iterator[Page]:
        return self.pages()

    def collect(self) -> List[Any]:
        """Materialize every item across all pages."""
        items: List[Any] = []
        for page in self.pages():
            items.extend(page.items)
        return items


class CursorPaginator:
    """Follow continuation cursors while the server reports more data.

    A scalar cursor is sent as ``cursor_param``; a dict cursor (such as the
    history endpoint's ``max``/``view_at``/``business``) is merged into the
    query. ``max_iterations`` bounds the loop regardless of what the server
    claims.
    """

    def __init__(
        self,
        client,
        url: str,
        params: Optional[Mapping] = None,
        decode: Callable[[Any], Tuple[List[Any], Cursor, bool]] = decode_cursor,
        cursor_param: str = 'cursor',
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        signed: bool = False
    ):
        self.client = client
        self.url = url
        self.params = dict(params or {})
        self.decode = decode
        self.cursor_param = cursor_param
        self.max_iterations = max_iterations
        self.signed = signed
        self._started = False

    def _params_for(self, cursor: Cursor) -> Dict[str, Any]:
        params = dict(self.params)
        if isinstance(cursor, dict):
            params.update(cursor)
        elif not _cursor_is_empty(cursor):
            params[self.cursor_param] = cursor
        return params

    def pages(self) -> Iterator[Page]:
        if self._started:
            raise RuntimeError('paginator already consumed')
        self._started = True

        cursor: Cursor = None
        for iteration in range(1, self.max_iterations + 1):
            data = self.client.get(self.url, self._params_for(cursor), signed=self.signed)
            if data is None:
                return
            items, next_cursor, has_more = self.decode(data)
            yield Page(items=list(items), signal=CursorSignal(next_cursor, has_more))

            if not has_more or _cursor_is_empty(next_cursor):
                return
            if iteration == self.max_iterations:
                logger.warning(
                    f"[CursorPaginator] iteration limit {self.max_iterations} reached: {self.url}"
                )
                return

            cursor = next_cursor
            self.client.humanize()

    def __iter__(self) -> Iterator[Page]:
        return self.pages()

    def collect(self) -> List[Any]:
        """Materialize every item across all pages."""
        items: List[Any] = []
        for page in self.pages():
            items.extend(page.items)
        return items
