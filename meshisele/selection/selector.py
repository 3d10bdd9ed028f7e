from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from enum import Enum

import numpy as np

from ..catalog.models import CatalogItem, FilterSpec
from ..catalog.providers import CatalogProvider
from .errors import NoMatch, ProviderUnavailable
from .predicates import has_any_required_ingredient, matches_all, passes_exclusions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectorConfig:
    timeout: float = 6.0
    # On the primary source, settle for items with some of the required
    # ingredients when none has all of them.
    ingredient_best_effort: bool = True


DEFAULT_SELECTOR_CONFIG = SelectorConfig()


class SelectionStage(str, Enum):
    strict = "strict"
    best_effort = "best_effort"
    lenient = "lenient"
    exclusions_only = "exclusions_only"
    not_found = "not_found"


class CatalogSource(str, Enum):
    primary = "primary"
    static = "static"


@dataclass(frozen=True)
class Selection:
    item: CatalogItem | None
    stage: SelectionStage
    source: CatalogSource | None = None
    candidate_count: int = 0

    @property
    def found(self) -> bool:
        return self.item is not None


NOT_FOUND = Selection(item=None, stage=SelectionStage.not_found)


class CandidateSelector:
    """Pick one random catalog item that satisfies a FilterSpec.

    The primary provider is queried with a bounded wait. Whatever it returns is
    filtered locally through a fixed relaxation ladder:

    1. strict: every predicate, all required ingredients included
    2. best effort (primary source only): every other predicate, with at
       least one of the required ingredients
    3. lenient: the cuisine predicate is dropped
    4. required ingredients still unmatched: stop with "not found"
    5. exclusions only: anything in the catalog that is not excluded

    When the primary provider is missing, fails, times out, returns nothing or
    ends the ladder empty at rung 5, the same ladder runs on the static catalog.
    """

    def __init__(
        self,
        primary: CatalogProvider | None,
        static: CatalogProvider,
        config: SelectorConfig = DEFAULT_SELECTOR_CONFIG,
        rng: np.random.Generator | None = None,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self.primary = primary
        self.static = static
        self.config = config
        self._rng = rng if rng is not None else np.random.default_rng()
        self._rng_lock = threading.Lock()
        self._executor = executor or ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="catalog-fetch",
        )

    def select(self, spec: FilterSpec) -> Selection:
        if self.primary is not None:
            items = self._fetch_with_timeout(self.primary, spec)
            if items:
                try:
                    return self._run_ladder(items, spec, CatalogSource.primary)
                except NoMatch as exc:
                    if exc.hard_stop:
                        logger.info("No item has all required ingredients: %s", exc)
                        return NOT_FOUND
                    logger.info("%s, trying static catalog", exc)
            else:
                logger.info(
                    "Provider %r returned no items, using static catalog", self.primary.name,
                )

        try:
            static_items = list(self.static.fetch(spec))
        except Exception:
            logger.warning("Static catalog %r failed to load", self.static.name, exc_info=True)
            return NOT_FOUND

        try:
            return self._run_ladder(static_items, spec, CatalogSource.static)
        except NoMatch as exc:
            logger.info("Selection exhausted: %s", exc)
            return NOT_FOUND

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    # ── internals ────────────────────────────────────────────────────────

    def _fetch_with_timeout(self, provider: CatalogProvider, spec: FilterSpec) -> list[CatalogItem]:
        """Run ``provider.fetch`` on a worker thread; failures count as zero items."""
        future = self._executor.submit(provider.fetch, spec)
        try:
            return list(future.result(timeout=self.config.timeout))
        except FutureTimeout:
            future.cancel()
            logger.warning(
                "Provider %r timed out after %.1fs", provider.name, self.config.timeout,
            )
        except ProviderUnavailable:
            logger.warning("Provider %r unavailable", provider.name, exc_info=True)
        except Exception:
            logger.warning("Provider %r raised unexpectedly", provider.name, exc_info=True)
        return []

    def _run_ladder(
        self, items: list[CatalogItem], spec: FilterSpec, source: CatalogSource,
    ) -> Selection:
        required = spec.active_required_ingredients

        strict = [i for i in items if matches_all(i, spec)]
        if strict:
            return self._pick(strict, SelectionStage.strict, source)

        if required and source is CatalogSource.primary and self.config.ingredient_best_effort:
            partial = [
                i for i in items
                if matches_all(i, spec, ignore_required=True) and has_any_required_ingredient(i, required)
            ]
            if partial:
                return self._pick(partial, SelectionStage.best_effort, source)

        lenient = [i for i in items if matches_all(i, spec, ignore_cuisine=True)]
        if lenient:
            return self._pick(lenient, SelectionStage.lenient, source)

        if required:
            raise NoMatch(source.value, len(items), hard_stop=True)

        not_excluded = [
            i for i in items
            if passes_exclusions(i, spec.excluded_ingredients, spec.excluded_allergens)
        ]
        if not_excluded:
            return self._pick(not_excluded, SelectionStage.exclusions_only, source)

        raise NoMatch(source.value, len(items))

    def _pick(
        self, candidates: list[CatalogItem], stage: SelectionStage, source: CatalogSource,
    ) -> Selection:
        with self._rng_lock:
            index = int(self._rng.integers(0, len(candidates)))
        chosen = candidates[index]
        logger.debug(
            "Picked %s from %d %s candidates (%s)", chosen.id, len(candidates), stage.value, source.value,
        )
        return Selection(
            item=chosen, stage=stage, source=source, candidate_count=len(candidates),
        )
