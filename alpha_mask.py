import logging

import cv2
import numpy as np
from PIL import Image, ImageSequence

from errors import InvalidImageError, InvalidParametersError

logger = logging.getLogger(__name__)


def load_rgba(image_path):
    """Charge une image et renvoie un tableau RGBA (H, W, 4) en uint8"""
    img = Image.open(image_path).convert("RGBA")
    rgba = np.array(img)
    logger.debug("Image chargée: %dx%d", rgba.shape[1], rgba.shape[0])
    return rgba


def load_frames(image_path):
    """Décode toutes les frames d'une image animée (GIF, APNG...)"""
    with Image.open(image_path) as img:
        frames = [np.array(frame.convert("RGBA")) for frame in ImageSequence.Iterator(img)]
    logger.debug("%d frame(s) chargée(s) depuis %s", len(frames), image_path)
    return frames


def validate_rgba(rgba):
    rgba = np.asarray(rgba)
    if rgba.ndim != 3 or rgba.shape[2] != 4:
        raise InvalidImageError(f"Tableau RGBA (H, W, 4) attendu, reçu {rgba.shape}")
    if rgba.dtype != np.uint8:
        raise InvalidImageError(f"Pixels uint8 attendus, reçu {rgba.dtype}")
    height, width = rgba.shape[:2]
    if width == 0 or height == 0:
        raise InvalidImageError(f"Image de surface nulle: {width}x{height}")
    return rgba


def check_threshold(threshold):
    if not 0 <= threshold <= 255:
        raise InvalidParametersError(f"Seuil alpha hors de [0, 255]: {threshold}")


def binarize_alpha(rgba, threshold):
    """
    Copie de l'image dont l'alpha vaut 0 ou 255.

    Un pixel devient opaque si alpha > threshold (cv2.THRESH_BINARY).
    Réappliquer le même seuil ne change plus rien.
    """
    rgba = validate_rgba(rgba)
    check_threshold(threshold)
    alpha = np.ascontiguousarray(rgba[:, :, 3])
    _, binary = cv2.threshold(alpha, float(threshold), 255, cv2.THRESH_BINARY)
    result = rgba.copy()
    result[:, :, 3] = binary
    return result


class OpacityMask:
    """Masque binaire plein / vide d'une image, figé après construction"""

    def __init__(self, solid):
        solid = np.asarray(solid, dtype=bool)
        if solid.ndim != 2 or solid.size == 0:
            raise InvalidImageError(f"Masque 2D non vide attendu, reçu {solid.shape}")
        self._solid = solid.copy()
        self._solid.setflags(write=False)
        self.height, self.width = solid.shape

    @classmethod
    def from_rgba(cls, rgba, threshold, inclusive=True):
        """
        Seuillage du canal alpha.

        inclusive=True : plein si alpha >= threshold (mailleur grille)
        inclusive=False: plein si alpha > threshold (traceur de contour)
        """
        rgba = validate_rgba(rgba)
        check_threshold(threshold)
        alpha = rgba[:, :, 3]
        solid = alpha >= threshold if inclusive else alpha > threshold
        return cls(solid)

    @property
    def array(self):
        return self._solid

    def solid(self, x, y):
        """Prédicat total: faux en dehors de l'image"""
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return False
        return bool(self._solid[y, x])

    def padded(self):
        """Copie entourée d'une bordure vide d'une cellule"""
        return np.pad(self._solid, 1, mode="constant", constant_values=False)

    def count(self):
        return int(self._solid.sum())

    def __repr__(self):
        return f"OpacityMask({self.width}x{self.height}, solid={self.count()})"
