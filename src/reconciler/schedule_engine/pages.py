"""Sequential per-page extraction with timeouts.

Pages are rendered and recognized one at a time: renderers commonly reuse
a single canvas, and remote OCR engines rate-limit. Each stage runs under
its own timeout; a failing page is recorded and the run moves on.

Synchronous stages run on a single worker thread owned by the run. A stage
that outlives its timeout keeps that worker until it returns, so later
pages queue behind it instead of overlapping it, and the run does not wait
for the stuck call before returning.
"""

import asyncio
import inspect
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable, List, Optional

from .errors import ExtractionError, PageTimeoutError
from .logging import get_logger
from .models import PagePayload, PageResult

log = get_logger(__name__)

# page number (1-based) -> rendered image
Renderer = Callable[[int], Any]
# rendered image -> fragments or text
Recognizer = Callable[[Any], PagePayload]


def _stage_executor() -> ThreadPoolExecutor:
    return ThreadPoolExecutor(max_workers=1, thread_name_prefix='page-extract')


async def _run_stage(func: Callable, arg: Any, timeout: float, page: int, stage: str,
                     executor: Executor) -> Any:
    if inspect.iscoroutinefunction(func):
        call = func(arg)
    else:
        call = asyncio.get_running_loop().run_in_executor(executor, func, arg)

    try:
        return await asyncio.wait_for(call, timeout)
    except asyncio.TimeoutError as e:
        raise PageTimeoutError(page, stage, timeout) from e


async def extract_page(
    page_number: int,
    render: Renderer,
    recognize: Recognizer,
    render_timeout: float = 10.0,
    recognition_timeout: float = 15.0,
    executor: Optional[Executor] = None,
) -> PageResult:
    """
    Render and recognize a single page.

    Args:
        page_number: 1-based page number
        render: Page renderer, sync or async
        recognize: Recognizer, sync or async
        render_timeout: Seconds allowed for rendering
        recognition_timeout: Seconds allowed for recognition
        executor: Worker for synchronous stages; a private single worker if omitted

    Returns:
        PageResult with a payload, or with an error and no payload
    """
    owned = executor is None
    if owned:
        executor = _stage_executor()

    try:
        image = await _run_stage(render, page_number, render_timeout,
                                 page_number, 'render', executor)
        payload = await _run_stage(recognize, image, recognition_timeout,
                                   page_number, 'recognize', executor)
    except ExtractionError as e:
        log.warning("page_extraction_failed", page=page_number, error=str(e))
        return PageResult(page_number, error=str(e))
    except Exception as e:
        # Extractor I/O failures cost this page only
        log.warning("page_extraction_failed", page=page_number, error=repr(e), exc_info=True)
        return PageResult(page_number, error=repr(e))
    finally:
        if owned:
            executor.shutdown(wait=False, cancel_futures=True)

    if payload is None:
        return PageResult(page_number, error="Recognizer returned no payload")
    return PageResult(page_number, payload=payload)


async def extract_pages(
    page_count: int,
    render: Renderer,
    recognize: Recognizer,
    render_timeout: float = 10.0,
    recognition_timeout: float = 15.0,
    page_delay: float = 0.5,
) -> List[PageResult]:
    """
    Extract pages 1..page_count in order, never two at once.

    Args:
        page_count: Number of pages
        render: Page renderer, sync or async
        recognize: Recognizer, sync or async
        render_timeout: Seconds allowed for rendering each page
        recognition_timeout: Seconds allowed for recognizing each page
        page_delay: Pause between consecutive pages

    Returns:
        One PageResult per page, in page order
    """
    results: List[PageResult] = []
    executor = _stage_executor()
    try:
        for page_number in range(1, page_count + 1):
            result = await extract_page(page_number, render, recognize,
                                        render_timeout, recognition_timeout,
                                        executor=executor)
            results.append(result)
            log.debug("page_extracted", page=page_number, ok=result.ok)

            if page_number < page_count and page_delay > 0:
                await asyncio.sleep(page_delay)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    return results


def extract_pages_sync(page_count: int, render: Renderer, recognize: Recognizer, **kwargs) -> List[PageResult]:
    """Blocking wrapper around `extract_pages` for synchronous callers."""
    return asyncio.run(extract_pages(page_count, render, recognize, **kwargs))
