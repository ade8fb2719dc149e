"""Static season catalog.

Each season's progress page shows a background image. When the browser asks
for the image of a season that has already ended, the override season's
image is served instead (see ``core.intercept``).
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from seasonpass.models.season import SeasonRecord

_IMG = "/img/destiny_content/season_progress"

SEASONS: tuple[SeasonRecord, ...] = (
    SeasonRecord(
        hash=2809059425,
        name="Season of the Undying",
        image_path=f"{_IMG}/season_8_undying.jpg",
        end_date=datetime(2019, 12, 10, 17, 0, tzinfo=UTC),
    ),
    SeasonRecord(
        hash=2809059424,
        name="Season of Dawn",
        image_path=f"{_IMG}/season_9_dawn.jpg",
        end_date=datetime(2020, 3, 10, 17, 0, tzinfo=UTC),
    ),
    SeasonRecord(
        hash=2809059427,
        name="Season of the Worthy",
        image_path=f"{_IMG}/season_10_worthy.jpg",
        end_date=datetime(2020, 6, 9, 17, 0, tzinfo=UTC),
    ),
    SeasonRecord(
        hash=2809059426,
        name="Season of Arrivals",
        image_path=f"{_IMG}/season_11_arrivals.jpg",
        end_date=datetime(2020, 11, 10, 17, 0, tzinfo=UTC),
    ),
    SeasonRecord(
        hash=2809059429,
        name="Season of the Hunt",
        image_path=f"{_IMG}/season_12_hunt.jpg",
        end_date=datetime(2021, 2, 9, 17, 0, tzinfo=UTC),
    ),
    SeasonRecord(
        hash=2809059428,
        name="Season of the Chosen",
        image_path=f"{_IMG}/season_13_chosen.jpg",
        end_date=datetime(2021, 5, 11, 17, 0, tzinfo=UTC),
    ),
    SeasonRecord(
        hash=2809059431,
        name="Season of the Splicer",
        image_path=f"{_IMG}/season_14_splicer.jpg",
        end_date=datetime(2021, 8, 24, 17, 0, tzinfo=UTC),
    ),
    SeasonRecord(
        hash=2809059430,
        name="Season of the Lost",
        image_path=f"{_IMG}/season_15_lost.jpg",
        end_date=datetime(2022, 2, 22, 17, 0, tzinfo=UTC),
    ),
)


def find_by_hash(
    season_hash: int | None, catalog: Sequence[SeasonRecord] = SEASONS
) -> SeasonRecord | None:
    """Return the first season with this hash, or None (including for None)."""
    if season_hash is None:
        return None
    return next((s for s in catalog if s.hash == season_hash), None)


def find_by_image_path(
    image_path: str, catalog: Sequence[SeasonRecord] = SEASONS
) -> SeasonRecord | None:
    """Return the first season whose background image is *image_path*, or None."""
    return next((s for s in catalog if s.image_path == image_path), None)


def image_urls(origin: str, catalog: Sequence[SeasonRecord] = SEASONS) -> list[str]:
    """Absolute URLs of every catalog background image, in catalog order.

    These are the URL filters the extension registers for image interception.
    """
    return [f"{origin}{s.image_path}" for s in catalog]
