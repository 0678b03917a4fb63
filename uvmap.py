"""
Projection des coordonnées de texture.

Toutes les UV sont exprimées dans l'espace normalisé de l'image source,
v = 1 en haut de l'image.
"""
import numpy as np


def project_cap_uvs(points, bbox, width, height):
    """
    UV des caps avant/arrière.

    points : (N, 2) positions image, en coins de pixels
    bbox   : (min_x, min_y, max_x, max_y) en coins de pixels
    Les UV locales à la bbox sont ramenées dans l'espace de l'image entière.
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    min_x, min_y, max_x, max_y = bbox
    bw = max_x - min_x
    bh = max_y - min_y

    u = (points[:, 0] - min_x) / bw
    v = 1 - (points[:, 1] - min_y) / bh

    mapped_u = min_x / width + u * bw / width
    mapped_v = 1 - min_y / height - (1 - v) * bh / height
    return np.column_stack([mapped_u, mapped_v])


def cylindrical_wall_uvs(positions):
    """
    Projection cylindrique des murs: angle autour de l'axe de profondeur
    pour u, profondeur normalisée pour v. Approximation avec couture
    visible là où l'angle repasse de 1 à 0.
    """
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    if len(positions) == 0:
        return np.zeros((0, 2))

    u = np.arctan2(positions[:, 1], positions[:, 0]) / (2 * np.pi) + 0.5
    z = positions[:, 2]
    depth = z.max() - z.min()
    v = (z - z.min()) / depth if depth > 0 else np.zeros_like(z)
    return np.column_stack([u, v])


def cell_center_uvs(cells, width, height, repeat=4):
    """Une seule UV par quad: le centre de la cellule pleine, répété sur ses sommets"""
    cells = np.asarray(cells, dtype=np.float64).reshape(-1, 2)
    u = (cells[:, 0] + 0.5) / width
    v = 1 - (cells[:, 1] + 0.5) / height
    return np.repeat(np.column_stack([u, v]), repeat, axis=0)
