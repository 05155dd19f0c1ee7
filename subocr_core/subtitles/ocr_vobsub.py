# subocr_core/subtitles/ocr_vobsub.py
# -*- coding: utf-8 -*-
"""
VobSub OCR orchestrator.

Runs every preprocessed subtitle through Tesseract on a bounded worker pool.
Each worker thread lazily builds its own engine the first time it needs one
and reuses it for every image it handles afterwards. Outcomes are returned in
input order regardless of which worker finished first.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

from ..errors import EngineInitError, OCRError
from ..models.settings import AppSettings
from ..models.subtitles import OCROutcome, PreprocessedSubtitle
from .engines.tesseract import OCREngine, TesseractEngine

logger = logging.getLogger(__name__)

EngineFactory = Callable[[AppSettings], OCREngine]
ProgressCallback = Callable[[int, int], None]

_thread_limit_lock = threading.Lock()
_thread_limit_applied = False


def limit_engine_threads() -> None:
    """
    Stop Tesseract from spawning its own OpenMP threads.

    Parallelism comes from the worker pool; nested threading inside each
    engine makes things slower. Applied once per process.
    """
    global _thread_limit_applied
    with _thread_limit_lock:
        if not _thread_limit_applied:
            os.environ["OMP_THREAD_LIMIT"] = "1"
            _thread_limit_applied = True


class OCROrchestrator:
    """Fans preprocessed subtitles out to a pool of per-thread OCR engines."""

    def __init__(
        self,
        settings: AppSettings,
        engine_factory: EngineFactory | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        """
        Args:
            settings: Worker count and DPI are read here; the rest goes to the engine factory
            engine_factory: Builds one engine for the calling thread. Defaults to TesseractEngine.
            progress_callback: Called as progress_callback(done, total) after each event
        """
        self.settings = settings
        self.engine_factory = engine_factory or TesseractEngine
        self.progress_callback = progress_callback
        self.max_workers = settings.ocr_workers or os.cpu_count() or 1

        self._local = threading.local()
        self._engines: list[OCREngine] = []
        self.engines_created = 0  # by the last run
        self._lock = threading.Lock()
        self._done = 0
        self._total = 0

    def _engine(self) -> OCREngine:
        engine = getattr(self._local, "engine", None)
        if engine is None:
            logger.debug("Building OCR engine on %s", threading.current_thread().name)
            engine = self.engine_factory(self.settings)
            self._local.engine = engine
            with self._lock:
                self._engines.append(engine)
                self.engines_created += 1
        return engine

    def _recognize_subtitle(self, subtitle: PreprocessedSubtitle) -> OCROutcome:
        engine = self._engine()
        started = time.perf_counter()

        try:
            text = "".join(
                engine.recognize(image, self.settings.ocr_dpi) for image in subtitle.images
            )
            outcome = OCROutcome(time_span=subtitle.time_span, text=text)
        except EngineInitError:
            raise
        except OCRError as e:
            outcome = OCROutcome(time_span=subtitle.time_span, error=e)

        logger.debug(
            "OCR %d line(s) at %dms in %.1fms",
            len(subtitle.images),
            subtitle.time_span.start_ms,
            (time.perf_counter() - started) * 1000.0,
        )

        if self.progress_callback is not None:
            with self._lock:
                self._done += 1
                done = self._done
            self.progress_callback(done, self._total)

        return outcome

    def _close_engines(self) -> None:
        # Only called once the pool has joined its workers
        with self._lock:
            engines, self._engines = self._engines, []
        for engine in engines:
            engine.close()

    def process(self, subtitles: Sequence[PreprocessedSubtitle]) -> list[OCROutcome]:
        """
        Recognize every subtitle.

        Returns:
            One outcome per input subtitle, in input order. Recognition
            failures are recorded on the outcome of the failing subtitle.

        Raises:
            EngineInitError: An engine could not be built; remaining work is cancelled
        """
        if not subtitles:
            return []

        limit_engine_threads()
        self._local = threading.local()
        self._done = 0
        self._total = len(subtitles)
        self.engines_created = 0

        logger.info(
            "Running OCR on %d subtitles with %d worker(s)", len(subtitles), self.max_workers
        )

        pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="ocr")
        try:
            outcomes = list(pool.map(self._recognize_subtitle, subtitles))
        except EngineInitError:
            pool.shutdown(wait=True, cancel_futures=True)
            raise
        finally:
            pool.shutdown(wait=True)
            self._close_engines()

        failed = sum(1 for outcome in outcomes if not outcome.success)
        logger.info("OCR finished: %d succeeded, %d failed", len(outcomes) - failed, failed)
        return outcomes


def process(
    subtitles: Sequence[PreprocessedSubtitle],
    settings: AppSettings,
    engine_factory: EngineFactory | None = None,
    progress_callback: ProgressCallback | None = None,
) -> list[OCROutcome]:
    """Recognize subtitles with a fresh orchestrator. See OCROrchestrator.process."""
    orchestrator = OCROrchestrator(settings, engine_factory, progress_callback)
    return orchestrator.process(subtitles)
