# src/imagecache/controllers/image_resolve_controller.py
from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Optional, Protocol, Union

from PIL import Image

from imagecache.managers.image_cache_manager import ImageCacheManager
from imagecache.model import (
    DisplayMetrics,
    DisplaySurface,
    Icon,
    ImageReference,
    ImageState,
    LevelImage,
    RefKind,
    ResolvedImage,
)
from imagecache.services.image_decode_service import (
    decode_bytes,
    decode_data_uri,
    decode_stream,
    probe_size,
    scale_factor,
)
from imagecache.services.http_transport_service import HttpTransport
from mailview_shell.core.managers.config_manager import config_manager
from mailview_shell.errors import DecodeError, MailViewError, TransportError
from mailview_shell.model import AttachmentStore, PreferenceStore

logger = logging.getLogger(__name__)


class Delivery(Protocol):
    def post(self, callback) -> None:
        ...


class Transport(Protocol):
    def open_stream(self, uri: str):
        ...


class ImageResolveController:
    """
    Maps an image reference to something displayable.

    Content-addressed, inline-data and cached remote images are resolved synchronously.
    Uncached remote images return a `LevelImage` showing an hourglass; the download runs
    on the injected executor and its outcome is posted to `delivery`, whose consumer runs
    on the display context and swaps the placeholder for the final level.
    """

    def __init__(
            self,
            *,
            attachments: AttachmentStore,
            prefs: PreferenceStore,
            executor: Executor,
            delivery: Delivery,
            cache: ImageCacheManager,
            transport: Optional[Transport] = None,
            metrics: Optional[DisplayMetrics] = None,
            icon_dp: Optional[int] = None,
    ) -> None:
        images_cfg = config_manager.get_nested("images", {}) or {}
        self.attachments = attachments
        self.prefs = prefs
        self.executor = executor
        self.delivery = delivery
        self.cache = cache
        self.transport = transport or HttpTransport(config_manager.get_nested("transport", {}) or {})
        self.metrics = metrics or DisplayMetrics(
            width_pixels=int(images_cfg.get("display_width", 1080)),
            density=float(images_cfg.get("density", 1.0)),
        )
        self.icon_dp = int(icon_dp or images_cfg.get("icon_dp", 24))

    # --- Placeholders ---

    def icon_size(self) -> int:
        compact = self.prefs.get_bool("compact", False)
        zoom = self.prefs.get_int("zoom", 0 if compact else 1)
        return max(1, round(self.icon_dp * (zoom + 1) * self.metrics.density))

    def _icon(self, state: ImageState, icon: Icon, px: int) -> ResolvedImage:
        return ResolvedImage(state=state, icon=icon, width=px, height=px)

    @staticmethod
    def _final(state: ImageState, image: Image.Image) -> ResolvedImage:
        return ResolvedImage(state=state, image=image, width=image.width, height=image.height)

    # --- Resolution ---

    def resolve(
            self,
            source: Optional[str],
            owner_id: int,
            show: bool,
            surface: Optional[DisplaySurface] = None,
            display_width: Optional[int] = None,
    ) -> Union[ResolvedImage, LevelImage]:
        """Never blocks on the network and never raises for a bad image."""
        px = self.icon_size()
        ref = ImageReference(raw=source or "")
        kind = ref.kind

        if kind == RefKind.EMPTY:
            return self._icon(ImageState.EMPTY, Icon.BROKEN_IMAGE, px)

        logger.debug("Image show=%s embedded=%s data=%s source=%s",
                     show, kind == RefKind.CONTENT, kind == RefKind.DATA, ref.raw[:120])

        if not show:
            icon = Icon.PHOTO_LIBRARY if kind in (RefKind.CONTENT, RefKind.DATA) else Icon.IMAGE
            return self._icon(ImageState.HIDDEN, icon, px)

        width_hint = int(display_width or self.metrics.width_pixels)

        if kind == RefKind.CONTENT:
            return self._resolve_content(ref, owner_id, width_hint, px)
        if kind == RefKind.DATA:
            return self._resolve_data(ref, px)
        return self._resolve_remote(ref, owner_id, surface, width_hint, px)

    def _resolve_content(self, ref: ImageReference, owner_id: int, width_hint: int, px: int) -> ResolvedImage:
        attachment = self.attachments.lookup(owner_id, ref.content_id)
        if attachment is None:
            return self._icon(ImageState.NOT_FOUND, Icon.BROKEN_IMAGE, px)
        if not attachment.available:
            return self._icon(ImageState.UNAVAILABLE, Icon.PHOTO_LIBRARY, px)

        try:
            with attachment.open_bytes() as fh:
                image = decode_bytes(fh.read(), max_width=width_hint)
        except (OSError, DecodeError) as e:
            logger.warning("Cannot decode attachment %s: %s", ref.content_id, e)
            return self._icon(ImageState.NOT_FOUND, Icon.BROKEN_IMAGE, px)
        return self._final(ImageState.LOCAL_HIT, image)

    def _resolve_data(self, ref: ImageReference, px: int) -> ResolvedImage:
        try:
            image = decode_data_uri(ref.raw)
        except DecodeError as e:
            logger.warning("Cannot decode data image: %s", e)
            return self._icon(ImageState.NOT_FOUND, Icon.BROKEN_IMAGE, px)
        return self._final(ImageState.DATA_DECODED, image)

    def _resolve_remote(
            self,
            ref: ImageReference,
            owner_id: int,
            surface: Optional[DisplaySurface],
            width_hint: int,
            px: int,
    ) -> Union[ResolvedImage, LevelImage]:
        if self.cache.exists(owner_id, ref.raw):
            try:
                return self._final(ImageState.CACHED_ON_DISK, self.cache.load(owner_id, ref.raw))
            except DecodeError as e:
                logger.warning("Cached image for %s is unreadable: %s", ref.raw, e)
                return self._icon(ImageState.NOT_FOUND, Icon.BROKEN_IMAGE, px)

        placeholder = LevelImage(self._icon(ImageState.FETCHING, Icon.HOURGLASS, px), source=ref.raw)
        placeholder.future = self.executor.submit(
            self._fetch_task, placeholder, ref.raw, owner_id, surface, width_hint, px)
        return placeholder

    # --- Worker side ---

    def download(self, source: str, owner_id: int, width_hint: int) -> Image.Image:
        """Probe, fetch with a power-of-two downscale, persist. Runs on a worker."""
        logger.debug("Probe %s", source)
        with self.transport.open_stream(source) as probe:
            width, _height = probe_size(probe)

        factor = scale_factor(width, width_hint)
        logger.debug("Download %s factor=%d", source, factor)
        with self.transport.open_stream(source) as stream:
            image = decode_stream(stream, factor)

        self.cache.store(owner_id, source, image)
        return image

    def _fetch_task(
            self,
            placeholder: LevelImage,
            source: str,
            owner_id: int,
            surface: Optional[DisplaySurface],
            width_hint: int,
            px: int,
    ) -> ResolvedImage:
        try:
            result = self._final(ImageState.FETCHED, self.download(source, owner_id, width_hint))
        except TransportError as e:
            logger.warning("Fetching %s failed: %s", source, e)
            logger.debug("Fetch failure details", exc_info=True)
            result = self._icon(ImageState.FETCH_FAILED_NETWORK, Icon.CLOUD_OFF, px)
        except Exception as e:
            # MailViewError, Pillow and cache errors alike end as a broken image
            level = logging.WARNING if isinstance(e, MailViewError) else logging.ERROR
            logger.log(level, "Image %s unusable: %s", source, e, exc_info=level >= logging.ERROR)
            result = self._icon(ImageState.FETCH_FAILED_DECODE, Icon.BROKEN_IMAGE, px)

        logger.debug("Posting image=%s", source)
        self.delivery.post(lambda: self._apply(placeholder, result, surface))
        return result

    @staticmethod
    def _apply(placeholder: LevelImage, result: ResolvedImage, surface: Optional[DisplaySurface]) -> None:
        placeholder.add_level(1, result)
        placeholder.set_level(1)
        if surface is not None:
            surface.refresh(placeholder)
