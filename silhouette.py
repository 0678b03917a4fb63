import logging
from dataclasses import dataclass

import numpy as np

from alpha_mask import OpacityMask

logger = logging.getLogger(__name__)

# Deux triangles par quad, sommets 0-1-2-3 dans l'ordre du contour
QUAD_TRIANGLES = np.array([[0, 1, 2], [2, 3, 0]], dtype=np.int64)

# Faces des deux caps (bloc z=+d2 puis bloc z=-d2), normales vers l'extérieur
CAP_TRIANGLES = np.array([[0, 1, 2], [2, 3, 0], [4, 7, 6], [6, 5, 4]], dtype=np.int64)


@dataclass(frozen=True)
class BoundaryEdges:
    """
    Arêtes unitaires orientées entre une cellule pleine et une cellule vide.

    Tous les tableaux sont (N, 2) en coordonnées (x, y) de la grille image.
    start/end décrivent le segment, solid_cell/empty_cell les deux cellules
    qu'il sépare.
    """
    start: np.ndarray
    end: np.ndarray
    solid_cell: np.ndarray
    empty_cell: np.ndarray

    def __len__(self):
        return len(self.start)


@dataclass(frozen=True)
class GridSilhouette:
    mask: OpacityMask
    edges: BoundaryEdges

    @property
    def width(self):
        return self.mask.width

    @property
    def height(self):
        return self.mask.height

    @property
    def wall_quad_count(self):
        return len(self.edges)


def _points(xs, ys):
    return np.column_stack([xs, ys]).astype(np.int64)


def find_boundary_edges(mask):
    """
    Énumère toutes les arêtes exposées du masque.

    Le balayage couvre [-1, width] x [-1, height] grâce au masque bordé
    d'une cellule vide, ce qui capture les bords qui touchent l'image.
    """
    padded = mask.padded()
    groups = []

    # Arêtes verticales: cellule (x, y) contre sa voisine de gauche (x-1, y)
    cell, left = padded[:, 1:], padded[:, :-1]
    y, x = np.nonzero(~cell & left)
    y = y - 1
    groups.append((_points(x, y), _points(x, y + 1), _points(x - 1, y), _points(x, y)))
    y, x = np.nonzero(cell & ~left)
    y = y - 1
    groups.append((_points(x, y + 1), _points(x, y), _points(x, y), _points(x - 1, y)))

    # Arêtes horizontales: voisine du haut (x, y-1) contre la cellule (x, y)
    top, cell = padded[:-1, :], padded[1:, :]
    y, x = np.nonzero(top & ~cell)
    x = x - 1
    groups.append((_points(x + 1, y), _points(x, y), _points(x, y - 1), _points(x, y)))
    y, x = np.nonzero(~top & cell)
    x = x - 1
    groups.append((_points(x, y), _points(x + 1, y), _points(x, y), _points(x, y - 1)))

    start, end, solid_cell, empty_cell = (np.concatenate(parts) for parts in zip(*groups))
    return BoundaryEdges(start, end, solid_cell, empty_cell)


def build_grid_silhouette(rgba, threshold):
    """Masque (alpha >= threshold) puis arêtes de silhouette"""
    mask = OpacityMask.from_rgba(rgba, threshold, inclusive=True)
    edges = find_boundary_edges(mask)
    if len(edges) == 0:
        logger.warning("Aucun pixel opaque au seuil %s: seuls les caps seront émis", threshold)
    logger.debug("Silhouette grille %dx%d: %d arêtes", mask.width, mask.height, len(edges))
    return GridSilhouette(mask, edges)


def wall_quads(edges, thickness):
    """
    Un quad par arête, de profondeur [-thickness/2, +thickness/2].

    Renvoie les positions (4N, 3) en unités pixel et les faces (2N, 3).
    """
    d2 = thickness / 2
    n = len(edges)
    positions = np.empty((n, 4, 3), dtype=np.float64)
    positions[:, 0, :2] = edges.start
    positions[:, 1, :2] = edges.end
    positions[:, 2, :2] = edges.end
    positions[:, 3, :2] = edges.start
    positions[:, :2, 2] = -d2
    positions[:, 2:, 2] = d2

    base = np.arange(n, dtype=np.int64) * 4
    faces = (base[:, None, None] + QUAD_TRIANGLES[None, :, :]).reshape(-1, 3)
    return positions.reshape(-1, 3), faces


def cap_quads(width, height, thickness):
    """Les deux caps couvrent tout le rectangle image, sans découpe"""
    d2 = thickness / 2
    corners = np.array([[0, 0], [width, 0], [width, height], [0, height]], dtype=np.float64)
    positions = np.vstack([
        np.column_stack([corners, np.full(4, d2)]),
        np.column_stack([corners, np.full(4, -d2)]),
    ])
    return positions, CAP_TRIANGLES.copy()
