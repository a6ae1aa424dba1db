import subprocess
import sys
from pathlib import Path

import PIL.Image
import pytest

import explore
from fractals import FractalKind, Viewport


def test_parse_step():
    step = explore.parse_step("zoom:400,300,2")
    assert step.action == "zoom"
    assert step.values == (400.0, 300.0, 2.0)
    assert explore.parse_step("reset").values == ()


@pytest.mark.parametrize("text", ["spin:1,2", "pan:1", "zoom:a,b,c", "select:1,2,3"])
def test_parse_step_rejects_bad_input(text):
    with pytest.raises(ValueError):
        explore.parse_step(text)


def test_apply_steps_in_order():
    viewport = Viewport.for_kind(FractalKind.MANDELBROT, 800, 600)
    for text in ["zoom:400,300,2", "select:200,150,600,450", "pan:80,0"]:
        viewport = explore.apply_step(viewport, explore.parse_step(text))
    assert viewport.zoom == pytest.approx(4.0)
    assert viewport.center_x == pytest.approx(-80 * 2 * 2.5 / 4.0 / 800)
    assert explore.apply_step(viewport, explore.parse_step("reset")).zoom == 1.0


def test_main_writes_png(tmp_path):
    output = tmp_path / "julia.png"
    result = explore.run([
        "--kind", "julia", "--width", "64", "--height", "48", "--max-iterations", "30",
        "--step", "wheel:32,24,-1", "--output", str(output),
    ])
    assert output.exists()
    with PIL.Image.open(output) as image:
        assert image.size == (64, 48)
    assert result.viewport.zoom == pytest.approx(1.1)


def test_main_appends_suffix_and_annotates(tmp_path):
    output = tmp_path / "sierpinski"
    explore.main([
        "--kind", "sierpinski", "--width", "120", "--height", "90", "--max-iterations", "20",
        "--format", "jpg", "--show-coordinates", "--output", str(output),
    ])
    written = tmp_path / "sierpinski.jpg"
    assert written.exists()
    with PIL.Image.open(written) as image:
        assert image.format == "JPEG"
        assert image.mode == "RGB"


def test_invalid_custom_color_is_reported(tmp_path, capsys):
    output = tmp_path / "gray.png"
    explore.main([
        "--width", "16", "--height", "12", "--max-iterations", "10", "--color-scheme", "custom",
        "--primary-color", "#nothex", "--output", str(output),
    ])
    assert "falling back to grayscale" in capsys.readouterr().out
    assert output.exists()


@pytest.mark.parametrize("args", [
    ["--kind", "koch"],
    ["--color-scheme", "sepia"],
    ["--width", "0"],
    ["--step", "warp:1"],
    ["--color-scheme", "colormap", "--colormap", "not-a-colormap"],
])
def test_bad_arguments_exit(args, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        explore.main([*args, "--output", str(tmp_path / "x.png")])
    assert excinfo.value.code == 2


def test_output_extension_must_match_format(tmp_path):
    with pytest.raises(SystemExit):
        explore.main(["--format", "png", "--output", str(tmp_path / "x.jpg")])


def test_entry_point_exits_cleanly(tmp_path):
    output = tmp_path / "entry.png"
    root = Path(__file__).resolve().parents[1]
    completed = subprocess.run(
        [sys.executable, "-c", "import sys, explore; sys.exit(explore.main())",
         "--width", "8", "--height", "6", "--max-iterations", "5", "--output", str(output)],
        cwd=root,
        capture_output=True,
        text=True,
    )
    assert completed.returncode == 0, completed.stderr
    assert output.exists()


def test_main_returns_none(tmp_path):
    assert explore.main(["--width", "8", "--height", "6", "--max-iterations", "5",
                         "--output", str(tmp_path / "none.png")]) is None
