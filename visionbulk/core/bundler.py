import base64
import binascii
import io
import logging
import zipfile
from typing import Iterable, List, Tuple

from PIL import Image, UnidentifiedImageError

from visionbulk.core.models import ScenePrompt, SceneStatus

logger = logging.getLogger(__name__)

# Fixed entry timestamp so the same scenes always give the same archive bytes
ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)

MIME_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}

PIL_EXTENSIONS = {
    "PNG": "png",
    "JPEG": "jpg",
    "WEBP": "webp",
    "GIF": "gif",
}


class NothingToBundleError(ValueError):
    """No scene has a completed image yet."""


class BundleError(RuntimeError):
    """The archive could not be built."""


def decode_image_payload(payload: str) -> Tuple[bytes, str]:
    """
    Decodes an embedded image payload into raw bytes and a file extension.

    Accepts "data:<mime>;base64,<data>" URLs as well as bare base64. For bare
    base64 the format is sniffed with Pillow, falling back to png.
    """
    mime_type = None
    data = payload
    if payload.startswith("data:"):
        header, _, data = payload.partition(",")
        mime_type = header[len("data:"):].split(";")[0].lower()

    raw = base64.b64decode(data, validate=True)

    if mime_type:
        return raw, MIME_EXTENSIONS.get(mime_type, "png")

    try:
        with Image.open(io.BytesIO(raw)) as img:
            return raw, PIL_EXTENSIONS.get(img.format, "png")
    except UnidentifiedImageError:
        return raw, "png"


def is_bundleable(scene: ScenePrompt) -> bool:
    return scene.status == SceneStatus.COMPLETED and bool(scene.image_url)


def select_bundle_entries(scenes: Iterable[ScenePrompt]) -> List[Tuple[int, ScenePrompt]]:
    """Completed scenes in list order, numbered densely from 1."""
    completed = [s for s in scenes if is_bundleable(s)]
    return list(enumerate(completed, start=1))


def bundle_scenes(scenes: Iterable[ScenePrompt]) -> bytes:
    """
    Packs every completed scene into one zip archive.

    Entries are named scene-<n>.<ext> with n counting only the completed
    scenes, so a failed scene leaves no gap in the numbering.

    Raises:
        NothingToBundleError: no scene is completed.
        BundleError: a payload could not be decoded or the archive not written.
    """
    entries = select_bundle_entries(scenes)
    if not entries:
        raise NothingToBundleError("No images ready to download yet.")

    buf = io.BytesIO()
    try:
        with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
            for n, scene in entries:
                raw, ext = decode_image_payload(scene.image_url)
                info = zipfile.ZipInfo(f"scene-{n}.{ext}", date_time=ZIP_TIMESTAMP)
                info.compress_type = zipfile.ZIP_DEFLATED
                zf.writestr(info, raw)
    except (binascii.Error, ValueError, OSError) as e:
        logger.error(f"Failed to create ZIP: {e}")
        raise BundleError(f"Failed to create ZIP: {e}") from e

    logger.info(f"Bundled {len(entries)} scenes.")
    return buf.getvalue()
