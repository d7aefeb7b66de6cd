# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Background analysis worker.

Requests go in on a bounded ``asyncio.Queue`` and responses come out on a
second queue, correlated only by the caller-supplied task id. A worker
handles one task at a time and keeps no state between tasks. Image decoding
runs in a thread so the event loop stays responsive; the pixel statistics
themselves run synchronously.

Example:
    >>> async def main():
    ...     async with AnalysisWorker() as worker:
    ...         await worker.submit(AnalysisTask("1", "analyze-colors", {"imagePath": "a.jpg"}))
    ...         return await worker.responses.get()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from filmrecipe.analyze.matching import StyleMatch, calculate_adjustments
from filmrecipe.analyze.pixels import PixelBuffer, load_pixels
from filmrecipe.analyze.stats import analyze_colors
from filmrecipe.config import AnalysisConfig
from filmrecipe.errors import FilmRecipeError, ValidationError
from filmrecipe.schema import MatchOptions
from filmrecipe.schema._parse import mapping

logger = logging.getLogger(__name__)

TASK_ANALYZE_COLORS = "analyze-colors"
TASK_MATCH_STYLE = "match-style"


@dataclass(frozen=True, slots=True)
class AnalysisTask:
    """A unit of work; ``data`` holds the camelCase task payload."""
    id: str
    type: str
    data: dict = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AnalysisResponse:
    id: str
    success: bool
    result: Optional[dict] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"id": self.id, "success": self.success}
        if self.result is not None:
            d["result"] = self.result
        if self.error is not None:
            d["error"] = self.error
        return d


def _image_path(data: dict, key: str) -> str:
    value = mapping(data, "Task data").get(key)
    if not isinstance(value, str) or not value:
        raise ValidationError(f"Task data is missing '{key}'")
    return value


class AnalysisWorker:
    """
    Pulls AnalysisTasks from ``tasks`` and posts AnalysisResponses to
    ``responses``.

    Failures (bad input, unreadable images, unknown task types) become
    unsuccessful responses; the worker keeps running.
    """

    def __init__(self, maxsize: int = 16, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()
        self.tasks: asyncio.Queue[Optional[AnalysisTask]] = asyncio.Queue(maxsize)
        self.responses: asyncio.Queue[AnalysisResponse] = asyncio.Queue()
        self._runner: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    async def start(self) -> None:
        if self.running:
            return
        self._runner = asyncio.create_task(self._run())
        logger.debug("Analysis worker started (queue size %d)", self.tasks.maxsize)

    async def stop(self) -> None:
        """Finish queued tasks, then stop the loop."""
        if not self.running:
            return
        await self.tasks.put(None)
        await self._runner
        self._runner = None
        logger.debug("Analysis worker stopped")

    async def __aenter__(self) -> AnalysisWorker:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def submit(self, task: AnalysisTask) -> None:
        """Enqueue a task, waiting while the queue is full."""
        await self.tasks.put(task)

    async def handle(self, task: AnalysisTask) -> AnalysisResponse:
        """Run one task and build its response."""
        try:
            if task.type == TASK_ANALYZE_COLORS:
                result = await self._analyze_colors(task.data)
            elif task.type == TASK_MATCH_STYLE:
                result = await self._match_style(task.data)
            else:
                raise ValidationError(f"Unknown worker task type: {task.type}")
        except (FilmRecipeError, OSError) as e:
            logger.warning("Task %s (%s) failed: %s", task.id, task.type, e)
            return AnalysisResponse(id=task.id, success=False, error=str(e))
        except Exception as e:
            logger.exception("Task %s (%s) failed unexpectedly", task.id, task.type)
            return AnalysisResponse(id=task.id, success=False, error=f"Unexpected error: {e}")
        return AnalysisResponse(id=task.id, success=True, result=result)

    async def _decode(self, path: str) -> PixelBuffer:
        return await asyncio.to_thread(load_pixels, path, max_size=self.config.max_size)

    async def _analyze_colors(self, data: dict) -> dict:
        buffer = await self._decode(_image_path(data, "imagePath"))
        return analyze_colors(buffer, self.config).to_dict()

    async def _match_style(self, data: dict) -> dict:
        base_path = _image_path(data, "baseImagePath")
        target_path = _image_path(data, "targetImagePath")
        options = MatchOptions.from_dict(mapping(data, "Task data").get("options") or {})

        base = analyze_colors(await self._decode(base_path), self.config)
        target = analyze_colors(await self._decode(target_path), self.config)
        match = StyleMatch(base, target, calculate_adjustments(base, target, options))
        return match.to_dict()

    async def _run(self) -> None:
        while True:
            task = await self.tasks.get()
            try:
                if task is None:
                    return
                response = await self.handle(task)
                await self.responses.put(response)
            finally:
                self.tasks.task_done()
