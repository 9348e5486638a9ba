"""
Ingest service — orchestrates fetch → extract → map → emit for each source.

Per source the traversal is a strict loop over pages:

    FETCH_PAGE → EXTRACT_ITEMS → (MAP_ITEM)* → DECIDE_NEXT → FETCH_PAGE | DONE

Pages are fetched one at a time and every item of a page is mapped before
the next fetch. The item cap can stop the traversal mid-page. Mapping,
sourcePath and transport failures are fatal for the source; whether the
remaining sources still run is the caller's choice (``fail_fast``).
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from content_bridge.core.exceptions import AppException
from content_bridge.core.logging import bind_source, get_logger
from content_bridge.mappers.document_mapper import DocumentMapper
from content_bridge.mappers.evaluator import ExpressionEvaluator, get_evaluator
from content_bridge.schemas.content_schema import ContentDocument
from content_bridge.schemas.ingest_schema import IngestReport, SourceReport
from content_bridge.schemas.source_schema import ContentBridgeConfig, SourceConfig
from content_bridge.services.markdown_writer import MarkdownWriter
from content_bridge.services.pagination import next_pagination_state, normalize_pagination
from content_bridge.services.request_builder import RequestBuilder
from content_bridge.services.source_client import DEFAULT_TIMEOUT_MS, SourceClient

logger = get_logger(__name__)

ContentSink = Callable[[ContentDocument], Awaitable[Any] | Any]


class InMemorySink:
    """Content sink that keeps every document it receives."""

    def __init__(self) -> None:
        self.documents: list[ContentDocument] = []

    def __call__(self, document: ContentDocument) -> None:
        self.documents.append(document)

    def __len__(self) -> int:
        return len(self.documents)


class IngestService:
    """Drive paginated fetches and hand mapped documents to a content sink."""

    def __init__(
        self,
        source_client: SourceClient,
        evaluator: ExpressionEvaluator | None = None,
        default_timeout_ms: float = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self._client = source_client
        self._evaluator = evaluator or get_evaluator()
        self._default_timeout_ms = default_timeout_ms

    async def ingest_all(
        self,
        config: ContentBridgeConfig | None,
        sink: ContentSink,
        fail_fast: bool = True,
    ) -> IngestReport:
        """
        Ingest every configured source in order.

        Sources without an endpoint are skipped. With ``fail_fast`` the first
        failing source aborts the run by re-raising; otherwise its error is
        recorded in the report and the next source runs.
        """
        report = IngestReport()
        if config is None:
            logger.warning("Missing content bridge config; nothing to load.")
            return report
        if not config.sources:
            logger.warning("No sources defined.")
            return report

        logger.info("Content load started", extra={"source_count": len(config.sources)})

        for source in config.sources:
            name = source.display_name
            if not source.fetch.endpoint_url:
                logger.warning(
                    "Missing endpointUrl in source configuration.",
                    extra={"source": name},
                )
                report.sources.append(SourceReport(name=name, skipped=True))
                continue

            max_items = source.max_items if source.max_items is not None else config.max_items
            try:
                added = await self.ingest_source(source, sink, max_items=max_items)
            except AppException as exc:
                if fail_fast:
                    raise
                logger.error(
                    "Source failed",
                    extra={"source": name, "error_code": exc.error_code, "error": exc.message},
                )
                report.sources.append(SourceReport(
                    name=name, error=exc.message, error_code=exc.error_code))
                continue

            report.sources.append(SourceReport(name=name, added_count=added))

        logger.info(
            "Content load finished",
            extra={"total_count": report.total_count, "failed": len(report.failed)},
        )
        return report

    async def ingest_source(
        self,
        source: SourceConfig,
        sink: ContentSink,
        max_items: int | None = None,
    ) -> int:
        """
        Traverse every page of one source and return the number of documents added.

        Raises:
            SourceAPIException:      A page request failed or timed out.
            TransformationException: A record failed validation or its
                                     output path was rejected.
        """
        log = bind_source(logger, source.display_name)
        fetch = source.fetch
        paging = normalize_pagination(fetch.pagination)
        timeout_ms = fetch.timeout_ms if fetch.timeout_ms is not None else self._default_timeout_ms
        if max_items is None:
            max_items = source.max_items
        cap = max_items if max_items is not None and max_items > 0 else None

        builder = RequestBuilder(
            fetch.endpoint_url or "",
            method=fetch.method,
            headers=fetch.headers,
            body=fetch.body,
            page_param=paging.page_param,
            size_param=paging.size_param,
            cursor_param=paging.cursor_param,
            log=log,
        )
        mapper = DocumentMapper(source.mapping, self._evaluator, source.display_name)
        writer = MarkdownWriter.from_config(source.markdown, self._evaluator, log)

        page_index = paging.page_index_start
        next_cursor = paging.cursor_start
        has_more = True
        is_first = True
        added = 0

        log.info("Traversal started", extra={"method": builder.method, "max_items": cap})

        while has_more:
            if not is_first and paging.delay_ms > 0:
                await asyncio.sleep(paging.delay_ms / 1000)

            request = builder.build(page_index, paging.page_size, next_cursor)
            data = await self._client.fetch_json(request, timeout_ms)
            items = self._evaluator.evaluate(data, paging.items_path)
            records = items if isinstance(items, list) else []

            log.debug(
                "Page fetched",
                extra={"page_index": page_index, "cursor": next_cursor, "item_count": len(records)},
            )

            for record in records:
                if cap is not None and added >= cap:
                    log.info("Item limit reached", extra={"added_count": added})
                    return added

                document = mapper.map_record(record)
                target = writer.resolve_path(record, document.header) if writer else None
                await _emit(sink, document)
                if writer and target is not None:
                    await writer.write(target, document)
                added += 1

            if cap is not None and added >= cap:
                log.info("Item limit reached", extra={"added_count": added})
                return added

            state = next_pagination_state(
                paging,
                data,
                items_length=len(records),
                page_index=page_index,
                next_cursor=next_cursor,
                resolve=self._evaluator.evaluate,
            )
            has_more = state.has_more
            page_index = state.page_index
            next_cursor = state.next_cursor
            is_first = False

        log.info("Traversal finished", extra={"added_count": added})
        return added


async def _emit(sink: ContentSink, document: ContentDocument) -> None:
    result = sink(document)
    if inspect.isawaitable(result):
        await result
