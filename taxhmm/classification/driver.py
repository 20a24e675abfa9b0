"""Classify a query by scoring it against a gallery of labelled profile HMMs."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, ProcessPoolExecutor, as_completed
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Type, Union

from taxhmm.algorithms.base import Query, SequenceDecoder
from taxhmm.algorithms.builder import build_profile_hmm
from taxhmm.algorithms.hmm import ProfileHMM
from taxhmm.algorithms.log_odds import LogOdds
from taxhmm.algorithms.viterbi import ViterbiDecoder
from taxhmm.errors import IntegrityError, NoPathError, TaxHMMError
from taxhmm.types import Alignment, ClassificationResult, ModelScore
from taxhmm.types.parameters import BuildConfig

logger = logging.getLogger(__name__)

ModelSource = Union[ProfileHMM, Alignment, Callable[[], ProfileHMM]]
ReportCallback = Callable[[ModelScore, Optional[str], Optional[LogOdds], int], None]


class BestResult:
    """Best (label, score) seen so far, safe to update from worker threads.

    On an exact tie the first caller to arrive keeps the spot, so under
    concurrent execution tie-breaking depends on scheduling.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.label: Optional[str] = None
        self.score: Optional[LogOdds] = None
        self.n_reports = 0

    def offer(self, result: ModelScore) -> Tuple[bool, Optional[str], Optional[LogOdds], int]:
        """Record one model outcome; returns (improved, best label, best score, count)."""
        with self._lock:
            self.n_reports += 1
            improved = False
            if result.succeeded and (self.score is None or result.score > self.score):
                self.label = result.label
                self.score = result.score
                improved = True
            return improved, self.label, self.score, self.n_reports


def _score_entry(
    label: str,
    source: ModelSource,
    query: Query,
    decoder: SequenceDecoder,
    build_config: Optional[BuildConfig],
) -> ModelScore:
    """Score the query against one gallery entry, capturing expected failures.

    Module-level so that process workers can unpickle it; everything it
    receives must be picklable too.
    """
    try:
        if isinstance(source, ProfileHMM):
            model = source
        elif isinstance(source, Alignment):
            model = build_profile_hmm(source, build_config, name=label)
        else:
            model = source()
        result = decoder.decode(model, query, retain_path=False)
    except NoPathError as exc:
        logger.warning("%s: skipped, %s", label, exc.message)
        return ModelScore(label=label, error=exc.message)
    except IntegrityError as exc:
        logger.error("%s: model construction defect, %s", label, exc.message)
        return ModelScore(label=label, error=exc.message)
    except (TaxHMMError, OSError) as exc:
        logger.warning("%s: skipped, %s", label, exc)
        return ModelScore(label=label, error=str(exc))

    logger.info("%s: log10 Viterbi score %s", label, result.score)
    return ModelScore(label=label, score=result.score)


class ClassificationDriver:
    """Fan one query out across a gallery of models and keep the best score.

    Each gallery entry is scored independently; entries whose model cannot be
    built or loaded, or that yield no Viterbi path, are recorded and skipped.
    With more than one worker, entries are scored on ``executor_class``
    (processes by default, since decoding is CPU-bound); gallery sources,
    the query and the decoder must then be picklable. Pass
    ``ThreadPoolExecutor`` to share models without pickling.
    """

    def __init__(
        self,
        max_workers: int = 1,
        decoder: Optional[SequenceDecoder] = None,
        build_config: Optional[BuildConfig] = None,
        on_report: Optional[ReportCallback] = None,
        executor_class: Type[Executor] = ProcessPoolExecutor,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers
        self.decoder = decoder if decoder is not None else ViterbiDecoder()
        self.build_config = build_config
        self.on_report = on_report
        self.executor_class = executor_class

    def score_one(self, label: str, source: ModelSource, query: Query) -> ModelScore:
        """Score the query against one gallery entry in the calling process."""
        return _score_entry(label, source, query, self.decoder, self.build_config)

    def _report(self, best: BestResult, result: ModelScore) -> None:
        _, label, score, n_reports = best.offer(result)
        if self.on_report is not None:
            self.on_report(result, label, score, n_reports)

    def classify(
        self, gallery: Mapping[str, ModelSource], query: Query
    ) -> ClassificationResult:
        """Report the gallery label whose model gives the query the highest score."""
        best = BestResult()
        outcomes: Dict[str, ModelScore] = {}

        if self.max_workers == 1:
            for label, source in gallery.items():
                result = self.score_one(label, source, query)
                outcomes[label] = result
                self._report(best, result)
        else:
            with self.executor_class(max_workers=self.max_workers) as executor:
                futures = {
                    executor.submit(
                        _score_entry, label, source, query, self.decoder, self.build_config
                    ): label
                    for label, source in gallery.items()
                }
                # Results are merged here, in the submitting thread
                for future in as_completed(futures):
                    result = future.result()
                    outcomes[futures[future]] = result
                    self._report(best, result)

        per_model: List[ModelScore] = [outcomes[label] for label in gallery]
        return ClassificationResult(
            best_label=best.label, best_score=best.score, per_model=per_model
        )


def classify(
    gallery: Mapping[str, ModelSource],
    query: Query,
    max_workers: int = 1,
) -> ClassificationResult:
    """Convenience wrapper around ``ClassificationDriver(...).classify``."""
    return ClassificationDriver(max_workers=max_workers).classify(gallery, query)


__all__ = ["BestResult", "ClassificationDriver", "ModelSource", "classify"]
