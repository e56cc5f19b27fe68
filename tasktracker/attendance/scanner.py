"""QR attendance capture loop.

Every ``interval`` seconds the scanner grabs a frame from the camera and, if
the camera delivered one, decodes it for a QR code. A decoded payload
overwrites ``pending_rfid``, the RFID waiting to be submitted. Each decode is
scheduled as its own task and never awaited by the timer, so a slow decode
never delays the next tick. Repeated scans of the same code are not
deduplicated.
"""

from __future__ import annotations

import asyncio
import io
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

from tasktracker.common.exceptions import ValidationException
from tasktracker.config import settings

logger = logging.getLogger(__name__)

Decoder = Callable[[Any], Optional[str]]


class FrameSource(Protocol):
    def read(self) -> Optional[Any]:
        """Current frame, or ``None`` when the feed has no data yet."""

    def release(self) -> None:
        ...


# ── Camera / decoder ────────────────────────────────────────────────

class OpenCVCamera:
    """Frames from a local camera through ``cv2.VideoCapture``."""

    def __init__(self, index: int = 0) -> None:
        import cv2

        self.index = index
        self._cap = cv2.VideoCapture(index)
        if not self._cap.isOpened():
            logger.error("Could not open camera %s", index)

    def read(self) -> Optional[Any]:
        if not self._cap.isOpened():
            return None
        ok, frame = self._cap.read()
        return frame if ok else None

    def release(self) -> None:
        self._cap.release()


def decode_qr(image: Any) -> Optional[str]:
    """Text of the first QR code in *image* (ndarray or PIL image), if any."""
    from pyzbar.pyzbar import decode as pyzbar_decode

    decoded = pyzbar_decode(image)
    if not decoded:
        return None
    return decoded[0].data.decode("utf-8").strip() or None


def decode_qr_image(content: bytes) -> Optional[str]:
    """Decode a QR code from an uploaded image file.

    Raises ``ValidationException`` when *content* is not a readable image.
    """
    from PIL import Image

    try:
        img = Image.open(io.BytesIO(content)).convert("RGB")
    except (OSError, Image.DecompressionBombError) as exc:
        logger.warning("Rejected uploaded QR image: %s", exc)
        raise ValidationException({"image": ["Please upload a valid image file"]}) from exc
    return decode_qr(img)


# ── Scanner ─────────────────────────────────────────────────────────

class QRScanner:
    """Periodic camera QR decode feeding the pending RFID field."""

    def __init__(
        self,
        *,
        interval: Optional[float] = None,
        camera_index: Optional[int] = None,
        source_factory: Optional[Callable[[], FrameSource]] = None,
        decoder: Decoder = decode_qr,
    ) -> None:
        self.interval = interval or settings.QR_SCAN_INTERVAL_SECONDS
        self.camera_index = settings.CAMERA_INDEX if camera_index is None else camera_index
        self._source_factory = source_factory or (lambda: OpenCVCamera(self.camera_index))
        self._decoder = decoder
        self._source: Optional[FrameSource] = None
        self._timer: Optional[asyncio.Task] = None
        self._decodes: set[asyncio.Task] = set()
        self._starting = asyncio.Lock()

        self.pending_rfid: Optional[str] = None
        self.scans = 0
        self.last_scan_at: Optional[datetime] = None

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    async def start(self) -> None:
        async with self._starting:
            if self.running:
                return
            # Opening a capture device blocks until the driver answers
            self._source = await asyncio.to_thread(self._source_factory)
            self._timer = asyncio.create_task(self._run(), name="qr-scanner")
            logger.info("QR scanner started (every %.1fs)", self.interval)

    async def stop(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                pass
        for task in list(self._decodes):
            task.cancel()
        if self._source is not None:
            self._source.release()
            self._source = None
        logger.info("QR scanner stopped")

    def take_pending(self) -> Optional[str]:
        """Return and clear the pending RFID."""
        rfid, self.pending_rfid = self.pending_rfid, None
        return rfid

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.schedule_scan()

    def schedule_scan(self) -> asyncio.Task:
        task = asyncio.create_task(self.scan_once())
        self._decodes.add(task)
        task.add_done_callback(self._decodes.discard)
        return task

    async def scan_once(self) -> Optional[str]:
        """Capture one frame and decode it; a found code overwrites the pending RFID."""
        source = self._source
        if source is None:
            return None
        frame = await asyncio.to_thread(source.read)
        if frame is None:
            return None
        try:
            text = await asyncio.to_thread(self._decoder, frame)
        except Exception:
            logger.exception("QR decode failed")
            return None
        if text:
            self.pending_rfid = text
            self.scans += 1
            self.last_scan_at = datetime.now(timezone.utc)
            logger.info("QR code scanned: %s", text)
        return text
