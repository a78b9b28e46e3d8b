"""
Image acquisition policy.

Shared mode fetches one image for the whole report. Unique mode fetches one
image per (case key, step id) pair. In both modes a failed fetch is logged
and replaced by "no image"; it never aborts the report.
"""
from __future__ import annotations

import base64
import logging
import os
import random
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Protocol

from apps.worker.lib.grouping import CaseCollection, field_text
from apps.worker.lib.image_provider import ImageProvider
from packages.shared.artifacts import FIELD_STEP_ID
from packages.shared.errors import ImageFetchFailed

UNIQUE_IMAGE_WORKERS = max(1, int(os.getenv("UNIQUE_IMAGE_WORKERS", "1")))

logger = logging.getLogger(__name__)

SeedFactory = Callable[[int], str]


@dataclass(frozen=True)
class ImageAsset:
    key: str
    data: bytes = field(repr=False)
    mime_type: str = "image/jpeg"

    def as_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def as_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.as_base64()}"


class ImageLookup(Protocol):
    def image_for(self, case_key: str, step_id: str) -> ImageAsset | None:
        ...


class SharedImages:
    """Every step resolves to the same asset (or to nothing)."""

    def __init__(self, asset: ImageAsset | None):
        self._asset = asset

    def shared_image(self) -> ImageAsset | None:
        return self._asset

    def image_for(self, case_key: str, step_id: str) -> ImageAsset | None:
        return self._asset


class UniqueImages:
    def __init__(self, assets: dict[tuple[str, str], ImageAsset] | None = None):
        self._assets = dict(assets or {})

    def image_for(self, case_key: str, step_id: str) -> ImageAsset | None:
        return self._assets.get((case_key, step_id))

    def __len__(self) -> int:
        return len(self._assets)


def _random_seed(counter: int) -> str:
    return str(random.random() + counter)


def acquire_shared_image(
    provider: ImageProvider,
    key: str = "shared",
    seed_factory: SeedFactory = _random_seed,
) -> SharedImages:
    logger.info("Downloading single image for reuse...")
    try:
        data = provider.fetch(seed_factory(0))
    except ImageFetchFailed as exc:
        logger.error(f"Error preparing reusable image: {exc}")
        return SharedImages(None)
    logger.info("Single image prepared for reuse")
    return SharedImages(ImageAsset(key=key, data=data))


def step_pairs(cases: CaseCollection) -> list[tuple[str, str]]:
    """Distinct (case key, step id) pairs in case-then-step order."""
    pairs: list[tuple[str, str]] = []
    seen: set[tuple[str, str]] = set()
    for case_key, case in cases.items():
        for step in case.steps:
            pair = (case_key, field_text(step, FIELD_STEP_ID))
            if pair not in seen:
                seen.add(pair)
                pairs.append(pair)
    return pairs


def acquire_unique_images(
    cases: CaseCollection,
    provider: ImageProvider,
    max_workers: int = UNIQUE_IMAGE_WORKERS,
    seed_factory: SeedFactory = _random_seed,
) -> UniqueImages:
    """
    Fetch one image per step pair. Sequential when max_workers == 1,
    otherwise a bounded pool. Each pair fails independently.
    """
    pairs = step_pairs(cases)

    def _fetch(index: int, pair: tuple[str, str]) -> ImageAsset | None:
        case_key, step_id = pair
        logger.info(f"Downloading unique image for step {step_id} of {case_key}...")
        try:
            data = provider.fetch(seed_factory(index))
        except ImageFetchFailed as exc:
            logger.error(f"Error preparing image for step {step_id} of {case_key}: {exc}")
            return None
        return ImageAsset(key=f"{case_key}-{step_id}", data=data)

    results: list[ImageAsset | None]
    if max_workers <= 1 or len(pairs) <= 1:
        results = []
        acquired = 0
        for pair in pairs:
            asset = _fetch(acquired, pair)
            if asset is not None:
                acquired += 1
            results.append(asset)
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(_fetch, range(len(pairs)), pairs))

    assets = {pair: asset for pair, asset in zip(pairs, results) if asset is not None}
    logger.info(f"Prepared {len(assets)} unique images for {len(pairs)} steps")
    return UniqueImages(assets)
