import numpy as np
import pytest

from imgine.cli.main import main
from imgine.services.image_service import ImageService


@pytest.fixture
def image_file(tmp_path, textured_bgr):
    path = tmp_path / "src.png"
    ImageService().save(ImageService().create_image(textured_bgr.pixels, path))
    return path


@pytest.fixture
def reference_file(tmp_path, warm_bgr):
    path = tmp_path / "ref.png"
    ImageService().save(ImageService().create_image(warm_bgr.pixels, path))
    return path


def test_transfer_writes_output(tmp_path, image_file, reference_file):
    out = tmp_path / "out.png"
    code = main(["transfer", str(image_file), str(reference_file),
                 "--ref-roi", "5,5,30,30", "--space", "CIELAB", "-o", str(out)])
    assert code == 0
    assert ImageService().load(out).pixels.shape == (48, 64, 3)


@pytest.mark.parametrize("command", ["grayscale", "equalize", "histogram"])
def test_single_image_commands(tmp_path, image_file, command):
    out = tmp_path / f"{command}.png"
    assert main([command, str(image_file), "-o", str(out)]) == 0
    assert out.exists()


def test_stats_prints_every_channel(image_file, capsys):
    assert main(["stats", str(image_file), "--roi", "0,0,8,8", "--space", "CIELAB"]) == 0
    printed = capsys.readouterr().out
    assert "(CIELAB)" in printed
    assert "channel 2" in printed


def test_inspect_prints_hex(image_file, capsys, textured_bgr):
    assert main(["inspect", str(image_file), "3", "4"]) == 0
    b, g, r = textured_bgr.pixels[4, 3]
    assert f"#{r:02x}{g:02x}{b:02x}" in capsys.readouterr().out


def test_batch(tmp_path, image_file, reference_file):
    out_dir = tmp_path / "batch"
    assert main(["batch", str(tmp_path), str(reference_file), "--out-dir", str(out_dir)]) == 0
    assert sorted(p.name for p in out_dir.iterdir()) == ["ref_transfer.png", "src_transfer.png"]


def test_errors_return_non_zero(tmp_path, image_file):
    out = tmp_path / "eq.png"
    assert main(["equalize", str(image_file), "--space", "LMS", "-o", str(out)]) == 1
    assert main(["stats", str(image_file), "--space", "CMYK"]) == 1
    assert main(["stats", str(tmp_path / "missing.png")]) == 1
    assert not out.exists()
