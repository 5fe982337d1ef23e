from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from selectolax.parser import HTMLParser, Node

from .base import LegendaryItem, ServerUpdate
from .errors import ParseCancelled
from .extractor import extract_item, parse_timestamp

logger = logging.getLogger(__name__)


class FragmentParser:
    """Turns a bot-activity page into ServerUpdates.

    Every update block is parsed in its own task, and every block distributes
    its item fragments over a small pool of worker tasks. Results are written
    into index-addressed buffers so the output never depends on completion
    order. Selectors (CSS):
      - block_sel: one timeline entry
      - date_sel: timestamp node inside a block
      - item_sel: item fragments inside a block
    """

    def __init__(
        self,
        *,
        workers_per_block: int = 4,
        block_sel: str = "div.timeline-item",
        date_sel: str = "div.date",
        item_sel: str = "p.m-b-xs",
    ) -> None:
        if workers_per_block < 1:
            raise ValueError("workers_per_block must be at least 1")
        self.workers_per_block = workers_per_block
        self.block_sel = block_sel
        self.date_sel = date_sel
        self.item_sel = item_sel

    # --- Public API ---
    async def parse(self, html: str, *, timeout: Optional[float] = None) -> List[ServerUpdate]:
        """Parse every update block and return them sorted by timestamp.

        Equal timestamps keep their document order. When timeout elapses the
        outstanding tasks are cancelled and ParseCancelled is raised; no
        partial list is ever returned.
        """
        doc = HTMLParser(html or "")
        blocks = doc.css(self.block_sel)
        logger.debug("Found %d update blocks", len(blocks))
        try:
            updates = await asyncio.wait_for(self._parse_blocks(blocks), timeout)
        except asyncio.TimeoutError as exc:
            raise ParseCancelled(timeout) from exc
        return sorted(updates, key=lambda u: u.server_timestamp)

    # --- Internals ---
    async def _parse_blocks(self, blocks: List[Node]) -> List[ServerUpdate]:
        tasks = [asyncio.ensure_future(self._parse_block(i, block)) for i, block in enumerate(blocks)]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for t in tasks:
                t.cancel()
            raise

    async def _parse_block(self, index: int, block: Node) -> ServerUpdate:
        date_node = block.css_first(self.date_sel)
        timestamp = parse_timestamp(date_node.text() if date_node is not None else "")

        fragments = block.css(self.item_sel)
        results: List[Optional[LegendaryItem]] = [None] * len(fragments)
        queue: asyncio.Queue = asyncio.Queue()
        for i, fragment in enumerate(fragments):
            queue.put_nowait((i, fragment))

        workers = [
            asyncio.ensure_future(self._item_worker(queue, results))
            for _ in range(min(self.workers_per_block, len(fragments)))
        ]
        try:
            await asyncio.gather(*workers)
        except BaseException:
            for w in workers:
                w.cancel()
            raise

        items = tuple(item for item in results if item is not None)
        logger.debug("Block %d: %d of %d fragments are legendary", index, len(items), len(fragments))
        return ServerUpdate(server_timestamp=timestamp, items=items)

    async def _item_worker(self, queue: asyncio.Queue, results: List[Optional[LegendaryItem]]) -> None:
        while True:
            try:
                index, fragment = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                results[index] = extract_item(fragment)
            except (AttributeError, IndexError, TypeError, ValueError) as exc:
                logger.warning("Dropping item fragment %d: %s", index, exc)
            finally:
                queue.task_done()
            # Yield between fragments so cancellation can interrupt a long block.
            await asyncio.sleep(0)
