"""
Input/output utilities for ImageSlim.

This module decodes and encodes image files with Pillow and manages JSON
configuration files for the command line tool.
"""

from typing import Any, Dict, Optional, Union
import json
import logging
from pathlib import Path

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_PATH = "out.jpg"
DEFAULT_FORMAT = "JPEG"

# Formats that cannot store an alpha channel
_OPAQUE_FORMATS = {"JPEG"}


def load_image(path: Union[str, Path]) -> np.ndarray:
    """
    Decode an image file into a ``uint8`` array.

    Grayscale images load as (H, W); images with transparency as
    (H, W, 4); everything else as (H, W, 3).

    Args:
        path: Image file path

    Returns:
        Decoded pixel array
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    with Image.open(path) as img:
        if img.mode == "P" and "transparency" in img.info:
            img = img.convert("RGBA")
        elif img.mode in ("LA", "PA"):
            img = img.convert("RGBA")
        elif img.mode not in ("L", "RGB", "RGBA"):
            img = img.convert("RGB")
        array = np.array(img, dtype=np.uint8)

    logger.info(f"Loaded {path} ({array.shape[1]}x{array.shape[0]}, {img.mode})")
    return array


def resolve_format(path: Union[str, Path], image_format: Optional[str] = None) -> str:
    """
    Pillow format name for an output file.

    An explicit ``image_format`` wins, given either as a Pillow format name
    or as a file extension; otherwise the suffix decides, falling
    back to JPEG for unknown suffixes.
    """
    extensions = Image.registered_extensions()
    if image_format:
        # Accept extension-style names such as "jpg" or "tif"
        return extensions.get("." + image_format.lower().lstrip("."), image_format.upper())

    suffix = Path(path).suffix.lower()
    return extensions.get(suffix, DEFAULT_FORMAT)


def save_image(
    image: np.ndarray,
    path: Union[str, Path],
    image_format: Optional[str] = None,
    quality: int = 95
) -> Path:
    """
    Encode an image array to a file.

    Args:
        image: ``uint8`` array of shape (H, W), (H, W, 3) or (H, W, 4)
        path: Output path; parent directories are created
        image_format: Pillow format name (inferred from the suffix if None)
        quality: Encoder quality for lossy formats

    Returns:
        Path that was written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    image_format = resolve_format(path, image_format)
    img = Image.fromarray(np.asarray(image, dtype=np.uint8))

    if img.mode == "RGBA" and image_format in _OPAQUE_FORMATS:
        logger.warning(f"{image_format} cannot store alpha; dropping alpha channel")
        img = img.convert("RGB")

    save_kwargs = {}
    if image_format in ("JPEG", "WEBP"):
        save_kwargs['quality'] = quality

    img.save(path, format=image_format, **save_kwargs)
    logger.info(f"Image saved to: {path} ({image_format})")
    return path


class ConfigurationManager:
    """
    Manager for ImageSlim configuration files.

    This class handles loading and saving of compression configurations
    as JSON.
    """

    @staticmethod
    def save_compression_config(
        config: Dict[str, Any],
        config_path: Union[str, Path]
    ) -> None:
        """
        Save compression configuration to file.

        Args:
            config: Configuration dictionary
            config_path: Path to save configuration
        """
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w') as f:
            json.dump(config, f, indent=2)

        logger.info(f"Configuration saved to: {config_path}")

    @staticmethod
    def load_compression_config(config_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load compression configuration from file.

        Values missing from the file are filled in from the defaults.

        Args:
            config_path: Path to configuration file

        Returns:
            Configuration dictionary
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            loaded = json.load(f)

        config = ConfigurationManager.create_default_config()
        for section, values in loaded.items():
            if isinstance(values, dict) and isinstance(config.get(section), dict):
                config[section].update(values)
            else:
                config[section] = values

        logger.info(f"Configuration loaded from: {config_path}")
        return config

    @staticmethod
    def create_default_config() -> Dict[str, Any]:
        """
        Create default compression configuration.

        Returns:
            Default configuration dictionary
        """
        return {
            "compression": {
                "level": 5,
                "backend": "torch",
                "method": "matmul",
                "max_workers": None
            },
            "output": {
                "path": DEFAULT_OUTPUT_PATH,
                "format": None,
                "quality": 95
            }
        }
