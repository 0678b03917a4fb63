import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import mapbox_earcut as earcut
import numpy as np

from alpha_mask import check_threshold, validate_rgba
from contour import Contour, trace_contour
from errors import ExtrusionError, InvalidParametersError, TriangulationError
from silhouette import GridSilhouette, build_grid_silhouette, cap_quads, wall_quads
from uvmap import cell_center_uvs, cylindrical_wall_uvs, project_cap_uvs

logger = logging.getLogger(__name__)


class Strategy(str, Enum):
    GRID = "grid"
    CONTOUR = "contour"


@dataclass(frozen=True)
class ExtrusionParameters:
    """
    Paramètres d'un appel de génération.

    thickness : distance entre les caps avant et arrière
    size      : taille finale du plus grand côté
    alpha_threshold : seuil alpha, comparé avec >= (grille) ou > (contour)
    strategy  : algorithme de construction du bord
    """
    thickness: float = 0.1
    size: float = 0.75
    alpha_threshold: float = 128
    strategy: Strategy = Strategy.GRID

    def __post_init__(self):
        if not self.thickness > 0:
            raise InvalidParametersError(f"thickness doit être > 0, reçu {self.thickness}")
        if not self.size > 0:
            raise InvalidParametersError(f"size doit être > 0, reçu {self.size}")
        check_threshold(self.alpha_threshold)
        try:
            object.__setattr__(self, "strategy", Strategy(self.strategy))
        except ValueError:
            raise InvalidParametersError(f"Stratégie inconnue: {self.strategy!r}") from None


@dataclass(frozen=True)
class MeshBuffer:
    positions: np.ndarray
    uvs: np.ndarray
    faces: np.ndarray

    @classmethod
    def empty(cls):
        return cls(np.zeros((0, 3)), np.zeros((0, 2)), np.zeros((0, 3), dtype=np.uint32))

    @property
    def indices(self):
        return self.faces.reshape(-1)

    @property
    def vertex_count(self):
        return len(self.positions)

    @property
    def triangle_count(self):
        return len(self.faces)

    @property
    def is_empty(self):
        return self.triangle_count == 0

    def validate(self):
        if self.positions.ndim != 2 or self.positions.shape[1] != 3:
            raise ExtrusionError(f"Positions (N, 3) attendues, reçu {self.positions.shape}")
        if self.uvs.shape != (len(self.positions), 2):
            raise ExtrusionError(f"Une UV par sommet attendue, reçu {self.uvs.shape}")
        if self.faces.ndim != 2 or self.faces.shape[1] != 3:
            raise ExtrusionError(f"Triangles (F, 3) attendus, reçu {self.faces.shape}")
        if self.faces.size and self.faces.max() >= len(self.positions):
            raise ExtrusionError("Indice de sommet hors limites")
        return self


@dataclass(frozen=True)
class ExtrusionResult:
    mesh: MeshBuffer
    strategy: Strategy
    contour: Optional[Contour] = None

    @property
    def bbox(self):
        """Bbox du contour tracé (stratégie contour uniquement)"""
        return self.contour.bbox if self.contour is not None else None


def _buffer(positions, uvs, faces):
    return MeshBuffer(
        positions=np.ascontiguousarray(positions, dtype=np.float64),
        uvs=np.ascontiguousarray(uvs, dtype=np.float64),
        faces=np.ascontiguousarray(faces, dtype=np.uint32).reshape(-1, 3),
    )


def build_boundary(rgba, params):
    """Construit le bord avec la stratégie choisie: GridSilhouette ou Contour"""
    if params.strategy is Strategy.CONTOUR:
        return trace_contour(rgba, params.alpha_threshold)
    return build_grid_silhouette(rgba, params.alpha_threshold)


def assemble(boundary, params):
    if isinstance(boundary, Contour):
        return assemble_contour(boundary, params)
    if isinstance(boundary, GridSilhouette):
        return assemble_grid(boundary, params)
    raise TypeError(f"Bord non pris en charge: {type(boundary).__name__}")


def assemble_grid(silhouette, params):
    """
    Caps pleine image + un quad par arête de silhouette.

    Les positions sont émises en pixels puis recentrées, mises à l'échelle
    pour que le plus grand côté de l'image vaille size, et tournées de π
    autour de x (l'axe y de l'image pointe vers le bas).
    """
    width, height = silhouette.width, silhouette.height
    cap_positions, cap_faces = cap_quads(width, height, params.thickness)
    wall_positions, wall_faces = wall_quads(silhouette.edges, params.thickness)

    cap_uvs = project_cap_uvs(cap_positions[:, :2], (0, 0, width, height), width, height)
    wall_uvs = cell_center_uvs(silhouette.edges.solid_cell, width, height)

    positions = np.vstack([cap_positions, wall_positions])
    faces = np.vstack([cap_faces, wall_faces + len(cap_positions)])
    uvs = np.vstack([cap_uvs, wall_uvs])

    center = (positions.min(axis=0) + positions.max(axis=0)) / 2
    positions = positions - center
    positions[:, :2] *= params.size / max(width, height)
    positions[:, 1:] *= -1

    return _buffer(positions, uvs, faces)


def simplify_polygon(points):
    """Retire les doublons consécutifs puis les sommets colinéaires d'un polygone fermé"""
    points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(points) > 1:
        points = points[np.any(points != np.roll(points, 1, axis=0), axis=1)]
    if len(points) < 3:
        return points

    prev = np.roll(points, 1, axis=0)
    nxt = np.roll(points, -1, axis=0)
    cross = ((points[:, 0] - prev[:, 0]) * (nxt[:, 1] - points[:, 1])
             - (points[:, 1] - prev[:, 1]) * (nxt[:, 0] - points[:, 0]))
    return points[cross != 0]


def signed_area(xy):
    x, y = xy[:, 0], xy[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def triangulate_cap(xy):
    """Triangulation earcut d'un anneau, triangles orientés dans le sens trigo"""
    xy = np.ascontiguousarray(xy, dtype=np.float64)
    rings = np.array([len(xy)], dtype=np.uint32)
    tri = np.asarray(earcut.triangulate_float64(xy, rings), dtype=np.int64)
    if tri.size % 3:
        raise TriangulationError(f"earcut a renvoyé {tri.size} indices")
    tri = tri.reshape(-1, 3)
    if len(tri) == 0:
        return tri

    a, b, c = xy[tri[:, 0]], xy[tri[:, 1]], xy[tri[:, 2]]
    cross = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    flip = cross < 0
    tri[flip] = tri[flip][:, ::-1]
    return tri


def assemble_contour(contour, params):
    """
    Extrusion du polygone tracé.

    Le polygone est normalisé dans [-size/2, size/2] avec sa propre bbox,
    les caps sont triangulées et les murs relient les sommets consécutifs.
    La profondeur vaut thickness * size.
    """
    points = simplify_polygon(contour.points)
    if len(points) < 3:
        logger.warning("Contour dégénéré (%d points utiles): rien à extruder", len(points))
        return MeshBuffer.empty()

    min_x, min_y, max_x, max_y = contour.lattice_bbox
    span = max(max_x - min_x, max_y - min_y)
    cx, cy = (min_x + max_x) / 2, (min_y + max_y) / 2
    xy = np.column_stack([(points[:, 0] - cx) / span, -(points[:, 1] - cy) / span])

    # Anneau dans le sens trigo pour que les murs regardent vers l'extérieur
    if signed_area(xy) < 0:
        xy = xy[::-1]
        points = points[::-1]

    n = len(xy)
    d2 = params.thickness / 2
    tri = triangulate_cap(xy)
    if len(tri) == 0:
        logger.warning("Triangulation vide pour un contour de %d points: caps omis", n)

    front = np.column_stack([xy, np.full(n, d2)])
    back = np.column_stack([xy, np.full(n, -d2)])

    # Sommets: cap avant, cap arrière, anneau arrière des murs, anneau avant des murs
    positions = np.vstack([front, back, back, front]) * params.size
    i = np.arange(n)
    j = (i + 1) % n
    wall_back, wall_front = 2 * n + i, 3 * n + i
    wall_back_next, wall_front_next = 2 * n + j, 3 * n + j
    walls = np.vstack([
        np.column_stack([wall_back, wall_back_next, wall_front_next]),
        np.column_stack([wall_front_next, wall_front, wall_back]),
    ])
    faces = np.vstack([tri, tri[:, ::-1] + n, walls])

    cap_uvs = project_cap_uvs(points, contour.lattice_bbox, contour.width, contour.height)
    wall_uvs = cylindrical_wall_uvs(positions[2 * n:])
    uvs = np.vstack([cap_uvs, cap_uvs, wall_uvs])

    return _buffer(positions, uvs, faces)


def extrude_image(rgba, params=None):
    """
    Point d'entrée: image RGBA -> mesh texturé.

    Lève InvalidImageError / InvalidParametersError avant tout calcul.
    Une silhouette vide n'est pas une erreur.
    """
    params = params or ExtrusionParameters()
    rgba = validate_rgba(rgba)

    boundary = build_boundary(rgba, params)
    mesh = assemble(boundary, params).validate()
    logger.info("Mesh %s: %d sommets, %d triangles",
                params.strategy.value, mesh.vertex_count, mesh.triangle_count)

    contour = boundary if isinstance(boundary, Contour) else None
    return ExtrusionResult(mesh=mesh, strategy=params.strategy, contour=contour)


def extrude_frames(frames, params=None):
    """Une extrusion indépendante par frame d'une image animée"""
    return [extrude_image(frame, params) for frame in frames]
