from pathlib import Path
from typing import Union
import numpy as np
from models.image import Image
from repositories.image_repository import ImageRepository


class ImageService:
    """I/O helpers.  No pixel math here."""
    def __init__(self, load_timeout: int = 5):
        self.load_timeout = load_timeout
        self.image_repository = ImageRepository()

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        return self.image_repository.create_image(pixels, path)

    def load(self, path: str | Path) -> Image:
        """Load a single image from disk into an RGBA Image object."""
        return self.image_repository.load(path, timeout=self.load_timeout)

    def save(self, image: Image) -> None:
        """
        Business-level method to save the image to its path (always PNG).
        """
        if image.path is None:
            raise ValueError("Cannot save an image without a path")
        self.image_repository.save(image)

    def save_as(self, image: Image, file_name: Union[str, Path], output_dir: Union[str, Path]) -> Image:
        """
        Save under the next free numbered name in output_dir and return
        the saved Image (with its final path).
        """
        out_path = self.image_repository.next_output_path(file_name, output_dir)
        saved = self.create_image(image.pixels, out_path)
        self.save(saved)
        return saved

