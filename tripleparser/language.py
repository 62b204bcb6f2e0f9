"""Language detection helpers."""

from __future__ import annotations

import logging
import threading

from tripleparser import settings

logger = logging.getLogger(__name__)

AUTO = "auto"

# langdetect loads its profiles into a module global on first use; batch
# workers must not race that load.
_factory_lock = threading.Lock()
_factory_ready = False


def _ensure_factory() -> None:
    global _factory_ready
    if _factory_ready:
        return
    with _factory_lock:
        if _factory_ready:
            return
        from langdetect import DetectorFactory
        from langdetect.detector_factory import init_factory

        DetectorFactory.seed = 0
        init_factory()
        _factory_ready = True


def detect_language(text: str) -> str | None:
    if not text:
        return None
    sample = text.strip()
    if len(sample) < 40:
        return None

    from langdetect import detect
    from langdetect.lang_detect_exception import LangDetectException

    _ensure_factory()
    try:
        code = detect(sample)
    except LangDetectException as exc:
        logger.debug("Language detection failed: %s", exc)
        return None
    return code.split("-")[0] if code else None


def resolve_language(requested: str | None, declared: str | None, text: str) -> str:
    """Turn ``"auto"`` into a concrete language code.

    Order: the page's declared language, then detection on *text*, then the
    default.  Any other *requested* value is returned lower-cased.
    """
    code = (requested or settings.DEFAULT_LANGUAGE).strip().lower()
    if code != AUTO:
        return code
    return declared or detect_language(text) or settings.DEFAULT_LANGUAGE
