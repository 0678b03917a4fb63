import argparse
import logging
import sys
from pathlib import Path

from alpha_mask import load_frames
from contour import show_contour
from createObj import export_mesh
from errors import ExtrusionError
from extrude import ExtrusionParameters, Strategy, extrude_frames
from logging_config import setup_logging


def build_parser():
    parser = argparse.ArgumentParser(description="Extrude la silhouette opaque d'une image en bloc 3D")
    parser.add_argument("image", help="Chemin de l'image à traiter")
    parser.add_argument("--thickness", type=float, default=0.1, help="épaisseur du bloc")
    parser.add_argument("--size", type=float, default=0.75, help="taille du plus grand côté")
    parser.add_argument("--threshold", type=float, default=128, help="seuil alpha (0-255)")
    parser.add_argument("--strategy", default=Strategy.GRID.value,
                        choices=[s.value for s in Strategy], help="grille de pixels ou contour tracé")
    parser.add_argument("--output", default="sticker.obj", help="fichier de sortie (.obj, .glb, .stl...)")
    parser.add_argument("--frames", action="store_true", help="un mesh par frame pour les images animées")
    parser.add_argument("--preview", action="store_true", help="affiche le contour tracé")
    parser.add_argument("--verbose", action="store_true", help="logs détaillés")
    parser.add_argument("--log-file", default=None, help="copie des logs dans un fichier")
    return parser


def frame_output_path(output, index, count):
    if count == 1:
        return output
    return output.with_name(f"{output.stem}_{index:03d}{output.suffix}")


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    print("Image :", args.image)
    print("Stratégie :", args.strategy)
    print("Épaisseur :", args.thickness)

    try:
        params = ExtrusionParameters(
            thickness=args.thickness,
            size=args.size,
            alpha_threshold=args.threshold,
            strategy=args.strategy,
        )
        frames = load_frames(args.image)
        if not args.frames:
            frames = frames[:1]
        results = extrude_frames(frames, params)
    except (ExtrusionError, OSError) as exc:
        print(f"Erreur: {exc}", file=sys.stderr)
        return 1

    output = Path(args.output)
    for index, (frame, result) in enumerate(zip(frames, results)):
        if result.mesh.is_empty:
            print(f"Frame {index}: aucune zone à extruder")
            continue

        path = export_mesh(result.mesh, frame_output_path(output, index, len(results)), texture=frame)
        print(f"Frame {index}: {result.mesh.triangle_count} triangles -> {path}")
        if result.bbox is not None:
            print(f"  bbox du contour: {result.bbox}")

        if args.preview and result.contour is not None:
            show_contour(frame, result.contour)

    return 0


if __name__ == "__main__":
    sys.exit(main())
