"""
Map provider initialization.

The browser map SDK needs a public access token and a style before anything can be
drawn. Instead of global "loaded" flags, one `MapProvider` per application owns a
`ready` future: `initialize()` resolves it, and callbacks registered earlier run
once it resolves successfully. A successful load is final. A failed one (for example a
token missing at startup) is reported on the current future, and the next
`initialize()` starts a fresh attempt that still serves the waiting callbacks.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

from pasturepickup.config.settings import Settings, get_settings
from pasturepickup.core.errors import MapProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MapConfig:
    """Public (browser-safe) map configuration."""

    access_token: str
    style_url: str
    default_center: tuple[float, float]  # (lng, lat)
    default_zoom: float


def load_map_config(settings: Settings) -> MapConfig:
    """Build the public config; a token exported after startup is picked up on retry."""
    maps = settings.maps
    token = (maps.access_token or os.getenv("MAPBOX_ACCESS_TOKEN") or "").strip()
    if not token:
        raise MapProviderError("Map access token is not configured (MAPBOX_ACCESS_TOKEN).")
    return MapConfig(
        access_token=token,
        style_url=maps.style_url,
        default_center=(maps.default_center_lng, maps.default_center_lat),
        default_zoom=maps.default_zoom,
    )


class MapProvider:
    """Application-scoped map SDK initialization with an explicit ready future."""

    def __init__(self, settings: Settings, *, loader: Callable[[Settings], MapConfig] = load_map_config):
        self._settings = settings
        self._loader = loader
        self._ready: Future[MapConfig] = Future()
        self._lock = threading.Lock()
        self._loading = False
        self._waiting: list[Callable[[MapConfig], None]] = []

    @property
    def ready(self) -> Future[MapConfig]:
        return self._ready

    @property
    def is_ready(self) -> bool:
        return self._ready.done() and self._ready.exception() is None

    def initialize(self) -> Future[MapConfig]:
        """Load the map config; later calls return the same future unless it failed."""
        with self._lock:
            if self._loading or (self._ready.done() and self._ready.exception() is None):
                return self._ready
            if self._ready.done():
                logger.info("Retrying map provider initialization")
                self._ready = Future()
                for callback in self._waiting:
                    self._attach(self._ready, callback)
            self._loading = True
            ready = self._ready

        try:
            config = self._loader(self._settings)
        except Exception as exc:
            logger.warning("Map provider initialization failed: %s", exc)
            ready.set_exception(exc)
        else:
            logger.info("Map provider ready (style=%s)", config.style_url)
            ready.set_result(config)
        finally:
            with self._lock:
                self._loading = False
        return ready

    def _attach(self, fut: Future[MapConfig], callback: Callable[[MapConfig], None]) -> None:
        def _run(done: Future[MapConfig]) -> None:
            if done.exception() is not None:
                return
            with self._lock:
                if callback not in self._waiting:
                    return
                self._waiting.remove(callback)
            callback(done.result())

        fut.add_done_callback(_run)

    def when_ready(self, callback: Callable[[MapConfig], None]) -> None:
        """Run `callback` with the config once ready (immediately if already ready).

        A failed initialization does not run it; it stays queued for the next attempt.
        """
        with self._lock:
            self._waiting.append(callback)
            fut = self._ready
        self._attach(fut, callback)

    def config(self, timeout: float | None = None) -> MapConfig:
        """Initialize if needed and return the config (re-raises initialization errors)."""
        return self.initialize().result(timeout=timeout)


@lru_cache
def get_map_provider() -> MapProvider:
    """Return the shared provider for this process."""
    return MapProvider(get_settings())
