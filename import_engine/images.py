"""
import_engine.images - Attach an original image from the image dump to a product.

We know where the dump of high-res originals lives (a local or mounted
folder) and that each filename given in the spreadsheet should be in
it.  A missing image is never a row failure.
"""

from __future__ import annotations

import logging
import mimetypes
import os
from pathlib import Path

from db.models import Image, Product
from services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


class ImageAttacher:

    def __init__(self, catalog: CatalogService, image_root: str | Path):
        self.catalog = catalog
        self.image_root = Path(image_root)

    def resolve(self, relative_filename: str) -> Path | None:
        """Absolute path for *relative_filename*, or None if it escapes the image root."""
        root = self.image_root.resolve()
        path = (root / relative_filename.strip().lstrip("/\\")).resolve()
        if path != root and root not in path.parents:
            return None
        return path

    def attach(self, relative_filename: str, product: Product) -> Image | None:
        if not relative_filename or not relative_filename.strip():
            return None

        path = self.resolve(relative_filename)
        if path is None:
            logger.warning(
                f"Image {relative_filename} is outside {self.image_root}, "
                f"so this image was not imported."
            )
            return None

        if not (path.is_file() and os.access(path, os.R_OK)):
            logger.warning(f"Image {path} was not found on the server, so this image was not imported.")
            return None

        try:
            data = path.read_bytes()
        except OSError as exc:
            logger.warning(f"Image {path} could not be read ({exc}), so this image was not imported.")
            return None

        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        image = self.catalog.attach_image(
            product, path.name, data,
            position=len(product.images),
            content_type=content_type,
        )
        logger.info(f"Image {path.name} attached to {product.name}")
        return image
