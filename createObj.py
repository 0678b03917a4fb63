import logging
from pathlib import Path

import numpy as np
import trimesh
from PIL import Image

from errors import ExtrusionError

logger = logging.getLogger(__name__)


def to_trimesh(mesh, texture=None):
    """
    Enveloppe un MeshBuffer dans un trimesh.Trimesh texturé.

    Les sommets ne sont pas fusionnés (process=False): caps et murs gardent
    chacun leurs UV.
    """
    if texture is not None and isinstance(texture, np.ndarray):
        texture = Image.fromarray(texture)
    visual = trimesh.visual.TextureVisuals(uv=mesh.uvs, image=texture)
    return trimesh.Trimesh(
        vertices=mesh.positions,
        faces=mesh.faces.astype(np.int64),
        visual=visual,
        process=False,
    )


def export_mesh(mesh, output_path, texture=None):
    """Exporte le mesh au format déduit de l'extension (.obj, .glb, .stl...)"""
    if mesh.is_empty:
        raise ExtrusionError(f"Mesh vide, rien à exporter vers {output_path}")
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    to_trimesh(mesh, texture).export(str(output_path))
    logger.info("Mesh exporté: %s (%d triangles)", output_path, mesh.triangle_count)
    return output_path
