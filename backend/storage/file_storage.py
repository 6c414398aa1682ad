"""
File storage abstraction.

Reads the cover images that accompany the catalogue file and checks that
uploaded bytes really are images before they reach the database.
"""
import logging
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


class ImageStorage:
    """
    Local image storage.

    Catalogue images are organized flat under the images root:
    - images/{image_name}
    """

    def __init__(self, images_root: str = "images"):
        self.images_root = Path(images_root)

    def get_absolute_path(self, image_name: str) -> Path:
        """Resolve an image name, refusing names that escape the root."""
        root = self.images_root.resolve()
        path = (root / image_name).resolve()
        if root != path and root not in path.parents:
            raise ValueError(f"image name escapes images root: {image_name}")
        return path

    def read_image(self, image_name: str) -> bytes:
        """
        Read a catalogue image.

        Raises:
            FileNotFoundError: if the image is not on disk
        """
        path = self.get_absolute_path(image_name)
        logger.debug("Reading image %s", path)
        return path.read_bytes()


def detect_image_format(data: bytes) -> Optional[str]:
    """Return the Pillow format name (e.g. "JPEG") or None if not an image."""
    if not data:
        return None
    try:
        with Image.open(BytesIO(data)) as img:
            img.verify()
            return img.format
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return None


def is_image(data: bytes) -> bool:
    return detect_image_format(data) is not None
