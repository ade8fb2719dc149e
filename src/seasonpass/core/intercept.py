"""Redirect decision functions for intercepted requests.

Both functions are pure: they read an ``OverrideState`` snapshot fetched for
the request being decided, plus the static catalog, and never touch the
store. The shell maps the returned decision onto the browser's blocking
response with ``to_blocking_response``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import urlencode

from seasonpass.core.credentials import is_self_request
from seasonpass.core.expiry import is_stale
from seasonpass.core.seasons import find_by_hash, find_by_image_path
from seasonpass.models.constants import SETTINGS_REDIRECT_ENDPOINT
from seasonpass.models.decision import CANCEL, InterceptDecision, Redirect
from seasonpass.models.season import OverrideState, SeasonRecord

logger = logging.getLogger(__name__)


def decide_image_request(
    requested_path: str,
    state: OverrideState,
    catalog: Sequence[SeasonRecord],
    now: int,
) -> InterceptDecision:
    """Decide what to do with a request for a season background image.

    Evaluated in order, first match wins:

    1. The override is stale: cancel.
    2. The override does not name a catalog season: cancel.
    3. The browser already asks for the override season's image: cancel.
    4. The requested image belongs to a season that has ended: redirect to
       the override season's image path.
    5. Anything else (unknown or still-live image): cancel.

    Cancel means "do not redirect"; the request proceeds unmodified.
    """
    if is_stale(state.last_changed_date, now):
        logger.debug("intercept_image: override is stale")
        return CANCEL

    override = find_by_hash(state.season_override, catalog)
    if override is None:
        logger.debug("intercept_image: no season data for override %s", state.season_override)
        return CANCEL

    if override.image_path == requested_path:
        logger.debug("intercept_image: %s is already the override image", requested_path)
        return CANCEL

    requested = find_by_image_path(requested_path, catalog)
    if requested is not None and requested.has_ended(now):
        logger.info(
            "intercept_image: redirect %s (%s) -> %s (%s)",
            requested_path,
            requested.name,
            override.image_path,
            override.name,
        )
        return Redirect(target=override.image_path)

    logger.debug("intercept_image: leaving %s untouched", requested_path)
    return CANCEL


def settings_redirect_url(season_override: int) -> str:
    return f"{SETTINGS_REDIRECT_ENDPOINT}?{urlencode({'season': season_override})}"


def decide_settings_request(
    request_url: str,
    state: OverrideState,
    now: int,
) -> InterceptDecision:
    """Decide whether to redirect a platform Settings request.

    The downstream endpoint builds the season-specific response itself, so
    the catalog is not consulted. Requests carrying the self-request marker
    are never redirected.
    """
    if is_self_request(request_url):
        logger.debug("intercept_settings: own request, stopping")
        return CANCEL

    if is_stale(state.last_changed_date, now):
        logger.debug("intercept_settings: override is stale, stopping")
        return CANCEL

    if not state.season_override:
        logger.debug("intercept_settings: no season override, stopping")
        return CANCEL

    target = settings_redirect_url(state.season_override)
    logger.info("intercept_settings: redirect %s -> %s", request_url, target)
    return Redirect(target=target)


def to_blocking_response(decision: InterceptDecision, origin: str = "") -> dict[str, Any]:
    """Translate a decision into the browser's blocking-response shape.

    Relative redirect targets (image paths) are prefixed with *origin*.
    Pass and Cancel both let the request through unmodified.
    """
    if isinstance(decision, Redirect):
        target = decision.target
        if target.startswith("/"):
            target = f"{origin}{target}"
        return {"redirectUrl": target}
    return {}
