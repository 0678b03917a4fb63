"""Tests de l'export trimesh et de la ligne de commande."""
import numpy as np
import pytest
from PIL import Image

import main
from createObj import export_mesh, to_trimesh
from errors import ExtrusionError
from extrude import ExtrusionParameters, MeshBuffer, extrude_image


class TestExport:

    def test_to_trimesh_keeps_vertices(self, two_blocks):
        mesh = extrude_image(two_blocks, ExtrusionParameters()).mesh

        tm = to_trimesh(mesh, texture=two_blocks)

        assert len(tm.vertices) == mesh.vertex_count
        assert len(tm.faces) == mesh.triangle_count
        np.testing.assert_allclose(tm.visual.uv, mesh.uvs)

    def test_export_obj(self, tmp_path, opaque_4x4):
        mesh = extrude_image(opaque_4x4, ExtrusionParameters(strategy="contour")).mesh
        path = tmp_path / "out" / "sticker.obj"

        export_mesh(mesh, path)

        lines = path.read_text().splitlines()
        assert sum(1 for line in lines if line.startswith("f ")) == mesh.triangle_count
        assert any(line.startswith("vt ") for line in lines)

    def test_export_empty_mesh(self, tmp_path):
        with pytest.raises(ExtrusionError):
            export_mesh(MeshBuffer.empty(), tmp_path / "empty.obj")


class TestCommandLine:

    @pytest.fixture(autouse=True)
    def quiet_logging(self, monkeypatch):
        monkeypatch.setattr(main, "setup_logging", lambda *args, **kwargs: None)

    def test_main_writes_mesh(self, tmp_path, two_blocks):
        image_path = tmp_path / "sticker.png"
        Image.fromarray(two_blocks).save(image_path)
        output = tmp_path / "sticker.obj"

        code = main.main([str(image_path), "--strategy", "contour", "--output", str(output)])

        assert code == 0
        assert output.exists()

    def test_main_frames(self, tmp_path):
        frames = [Image.new("RGBA", (4, 4), (255, 0, 0, 255)),
                  Image.new("RGBA", (4, 4), (0, 0, 255, 255))]
        image_path = tmp_path / "anim.gif"
        frames[0].save(image_path, save_all=True, append_images=frames[1:], duration=100)
        output = tmp_path / "anim.obj"

        code = main.main([str(image_path), "--frames", "--output", str(output)])

        assert code == 0
        assert (tmp_path / "anim_000.obj").exists()
        assert (tmp_path / "anim_001.obj").exists()

    def test_main_rejects_bad_thickness(self, tmp_path, opaque_4x4, capsys):
        image_path = tmp_path / "square.png"
        Image.fromarray(opaque_4x4).save(image_path)

        code = main.main([str(image_path), "--thickness", "0"])

        assert code == 1
        assert "thickness" in capsys.readouterr().err

    def test_main_missing_file(self, tmp_path):
        assert main.main([str(tmp_path / "missing.png")]) == 1
