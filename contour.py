import logging
from dataclasses import dataclass

import numpy as np
import matplotlib.pyplot as plt
from scipy.ndimage import binary_erosion, generate_binary_structure

from alpha_mask import binarize_alpha

logger = logging.getLogger(__name__)

# Voisins dans l'ordre horaire (y vers le bas): E, SE, S, SW, W, NW, N, NE
DIRECTIONS = [(1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1)]

# Côtés d'un pixel dans l'ordre horaire: (voisin 4-connexe, coin de départ du côté)
SIDES = [
    ((0, -1), (0, 0)),   # haut
    ((1, 0), (1, 0)),    # droite
    ((0, 1), (1, 1)),    # bas
    ((-1, 0), (0, 1)),   # gauche
]


@dataclass(frozen=True)
class Contour:
    """
    Une boucle de bord tracée.

    points : coins du réseau de pixels (N, 2), ordre horaire dans l'image
    pixels : pixels de bord parcourus (M, 2), dans l'ordre de la marche
    bbox   : (min_x, min_y, max_x, max_y) des pixels parcourus
    closed : la marche est revenue à côté de son pixel de départ
    """
    points: np.ndarray
    pixels: np.ndarray
    bbox: tuple
    closed: bool
    width: int
    height: int

    def __len__(self):
        return len(self.points)

    @property
    def is_empty(self):
        return len(self.pixels) == 0

    @property
    def lattice_bbox(self):
        """Bbox en coins de pixels: le pixel max_x s'étend jusqu'à max_x + 1"""
        min_x, min_y, max_x, max_y = self.bbox
        return min_x, min_y, max_x + 1, max_y + 1


class ContourTracer:
    def __init__(self, rgba, threshold=128):
        """Binarise une copie de l'image (alpha > threshold) et repère les pixels de bord"""
        self.binary = binarize_alpha(rgba, threshold)
        self.solid = self.binary[:, :, 3] > 0
        self.height, self.width = self.solid.shape

        # Pixel de bord: plein, et sur le bord de l'image ou avec un 4-voisin vide
        cross = generate_binary_structure(2, 1)
        interior = binary_erosion(self.solid, structure=cross, border_value=0)
        self.edge = self.solid & ~interior

    def _key(self, x, y):
        return y * self.width + x

    def is_solid(self, x, y):
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return False
        return bool(self.solid[y, x])

    def is_edge(self, x, y):
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return False
        return bool(self.edge[y, x])

    def find_start(self):
        """Premier pixel de bord en balayage ligne par ligne"""
        candidates = np.argwhere(self.edge)
        if len(candidates) == 0:
            return None
        y, x = candidates[0]
        return int(x), int(y)

    def walk(self, start):
        """
        Marche de Moore sur les 8 voisins à partir de start.

        À chaque pas on balaie les voisins dans l'ordre horaire en commençant
        juste après la direction de retour, et on prend le premier pixel de
        bord pas encore visité. La marche s'arrête quand il n'y en a plus.
        """
        x, y = start
        visited = {self._key(x, y)}
        pixels = [start]
        min_x, min_y, max_x, max_y = x, y, x, y
        # Le balayage ligne par ligne arrive sur start depuis l'ouest
        arrival = 0

        while True:
            backtrack = (arrival + 4) % 8
            for step in range(1, 9):
                direction = (backtrack + step) % 8
                dx, dy = DIRECTIONS[direction]
                nx, ny = x + dx, y + dy
                if self.is_edge(nx, ny) and self._key(nx, ny) not in visited:
                    break
            else:
                break

            visited.add(self._key(nx, ny))
            pixels.append((nx, ny))
            min_x, max_x = min(min_x, nx), max(max_x, nx)
            min_y, max_y = min(min_y, ny), max(max_y, ny)
            x, y, arrival = nx, ny, direction

        return pixels, (min_x, min_y, max_x, max_y)

    def outline(self, pixels):
        """
        Coins du réseau qui bordent les pixels parcourus.

        Chaque pixel donne le coin de départ de chacun de ses côtés exposés,
        dans l'ordre horaire, en commençant au premier côté de sa série
        de côtés exposés.
        """
        points = []
        for x, y in pixels:
            exposed = [not self.is_solid(x + nx, y + ny) for (nx, ny), _ in SIDES]
            first = next((i for i in range(4) if exposed[i] and not exposed[i - 1]), 0)
            for k in range(4):
                i = (first + k) % 4
                if exposed[i]:
                    cx, cy = SIDES[i][1]
                    point = (x + cx, y + cy)
                    if not points or points[-1] != point:
                        points.append(point)
        if len(points) > 1 and points[0] == points[-1]:
            points.pop()
        return points

    def trace(self):
        start = self.find_start()
        if start is None:
            logger.warning("Aucun pixel au-dessus du seuil: contour vide")
            return Contour(
                points=np.zeros((0, 2), dtype=np.int64),
                pixels=np.zeros((0, 2), dtype=np.int64),
                bbox=(self.width, self.height, 0, 0),
                closed=False,
                width=self.width,
                height=self.height,
            )

        pixels, bbox = self.walk(start)
        last_x, last_y = pixels[-1]
        closed = len(pixels) == 1 or max(abs(last_x - start[0]), abs(last_y - start[1])) <= 1
        if not closed:
            logger.warning("Contour ouvert: la marche s'arrête après %d pixels", len(pixels))

        points = self.outline(pixels)
        logger.debug("Contour: %d pixels, %d points, bbox=%s", len(pixels), len(points), bbox)
        return Contour(
            points=np.array(points, dtype=np.int64).reshape(-1, 2),
            pixels=np.array(pixels, dtype=np.int64).reshape(-1, 2),
            bbox=tuple(int(v) for v in bbox),
            closed=closed,
            width=self.width,
            height=self.height,
        )


def trace_contour(rgba, threshold=128):
    """Fonction simple: un seul contour, celui de la première composante trouvée"""
    return ContourTracer(rgba, threshold).trace()


def show_contour(rgba, contour, show=True):
    """Affiche l'image avec le contour tracé et sa bbox"""
    fig, ax = plt.subplots(figsize=(8, 8))
    ax.imshow(rgba, interpolation="nearest")

    if not contour.is_empty:
        # imshow centre les pixels sur les entiers, les coins sont à -0.5
        outline = np.vstack([contour.points, contour.points[:1]]) - 0.5
        ax.plot(outline[:, 0], outline[:, 1], 'r-', linewidth=1.5)
        min_x, min_y, max_x, max_y = contour.lattice_bbox
        rect = plt.Rectangle((min_x - 0.5, min_y - 0.5), max_x - min_x, max_y - min_y,
                             fill=False, color='blue', linestyle='--', linewidth=1)
        ax.add_patch(rect)

    state = "fermé" if contour.closed else "ouvert"
    ax.set_title(f"Contour {state}: {len(contour)} points, bbox={contour.bbox}")
    ax.axis('off')
    plt.tight_layout()
    if show:
        plt.show()
    return fig
