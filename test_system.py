"""
End-to-end tests for the background removal system
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path

import cv2
import numpy as np
import pytest
from PIL import Image

from rmbg.utils.config import (
    load_config, update_config, resolve_thresholds, validate_configuration,
    DEFAULT_THRESHOLDS
)
from rmbg.utils.io import resolve_input_files, output_path_for, read_image
from rmbg.models import detect_edges, build_mask
from rmbg.controllers import pipeline
from rmbg.controllers.pipeline import run_one, run_batch, remove_backgrounds, ProcessStatus
from rmbg.controllers.cli import main


def write_square(path, size=100, lo=30, hi=200, top=30, bottom=70):
    img = np.full((size, size, 3), lo, dtype=np.uint8)
    img[top:bottom, top:bottom] = hi
    assert cv2.imwrite(str(path), img)
    return img


def write_blob(path, seed):
    rng = np.random.default_rng(seed)
    img = np.full((60, 80, 3), 20, dtype=np.uint8)
    cx, cy = int(rng.integers(25, 55)), int(rng.integers(20, 40))
    cv2.circle(img, (cx, cy), 12, tuple(int(v) for v in rng.integers(120, 255, 3)), -1)
    assert cv2.imwrite(str(path), img)
    return img


def outputs_for(path):
    path = Path(path)
    return sorted(path.parent.glob(f"{path.name}-*.png"))


def load_rgba(path):
    return np.array(Image.open(path))


# ----------------------------------------------------------------------
# Imports and configuration
# ----------------------------------------------------------------------

def test_imports():
    from rmbg.models import detect_edges, build_mask, apply_mask  # noqa: F401
    from rmbg.views import save_rgba  # noqa: F401
    from rmbg.controllers import run_one, run_batch, partition  # noqa: F401


def test_default_configuration():
    config = load_config()
    assert (config['canny']['low'], config['canny']['high']) == DEFAULT_THRESHOLDS
    assert config['batch']['split_threshold'] == 8
    assert config['batch']['max_workers'] is None
    assert validate_configuration(config)


def test_configuration_file(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("canny:\n  low: 12\nbatch:\n  split_threshold: 4\n", encoding="utf-8")

    config = load_config(str(cfg_path))

    assert config['canny']['low'] == 12
    assert config['canny']['high'] == DEFAULT_THRESHOLDS[1]
    assert config['batch']['split_threshold'] == 4
    assert config['batch']['shuffle'] is True


def test_shipped_configuration_loads():
    config = load_config(str(Path(__file__).parent / "configs" / "config.yaml"))
    assert validate_configuration(config)


def test_missing_configuration_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_update_config_overrides():
    config = load_config()
    update_config(config, {'batch.max_workers': 3, 'batch.split_threshold': None, 'paths.out_logs': 'logs'})
    assert config['batch']['max_workers'] == 3
    assert config['batch']['split_threshold'] == 8
    assert config['paths']['out_logs'] == 'logs'


def test_invalid_configuration_is_rejected():
    config = load_config()
    config['batch']['split_threshold'] = 0
    assert not validate_configuration(config)

    config = load_config()
    config['batch']['max_workers'] = -2
    assert not validate_configuration(config)


@pytest.mark.parametrize("key,value", [
    ('split_threshold', True),
    ('max_workers', True),
    ('max_workers', 2.5),
])
def test_non_integer_batch_limits_are_rejected(key, value):
    config = load_config()
    config['batch'][key] = value
    assert not validate_configuration(config)


def test_boolean_threshold_is_rejected():
    config = load_config()
    config['canny']['low'] = True
    assert not validate_configuration(config)


# ----------------------------------------------------------------------
# External collaborators: thresholds, inputs, output names
# ----------------------------------------------------------------------

@pytest.mark.parametrize("values,expected", [
    (None, (5.0, 50.0)),
    ([], (5.0, 50.0)),
    (["10"], (5.0, 50.0)),
    (["abc", "7"], (5.0, 50.0)),
    (["80", "10"], (10.0, 80.0)),
    (["10", "80"], (10.0, 80.0)),
    (["-1", "3", "9"], (3.0, 9.0)),
    ([20, 20], (20.0, 20.0)),
])
def test_resolve_thresholds(values, expected):
    assert resolve_thresholds(values) == expected


def test_resolve_input_files(tmp_path):
    a = tmp_path / "a.png"
    b = tmp_path / "b.png"
    write_square(a)
    write_square(b)
    (tmp_path / "subdir").mkdir()

    tokens = [str(a), str(tmp_path / "missing.png"), str(b),
              str(tmp_path / "subdir"), str(tmp_path / "." / "a.png")]
    files = resolve_input_files(tokens)

    assert files == [a, b]


def test_output_path_format():
    now = datetime(2026, 10, 18, 14, 3, 7, 42000)
    out = output_path_for("photos/cat.jpg", now)
    assert out == Path("photos/cat.jpg-2026.10.18-14.03.07.042.png")


# ----------------------------------------------------------------------
# Pipeline
# ----------------------------------------------------------------------

def test_single_square_image(tmp_path):
    src = tmp_path / "square.png"
    img = write_square(src)

    result = run_one(src, 5, 50)

    assert result.ok
    assert result.output.exists()
    assert outputs_for(src) == [result.output]

    rgba = load_rgba(result.output)
    assert rgba.shape == (100, 100, 4)
    # Color channels are the source pixels, untouched by the mask
    np.testing.assert_array_equal(rgba[:, :, :3], cv2.cvtColor(img, cv2.COLOR_BGR2RGB))

    expected_mask = build_mask(detect_edges(img, 5, 50))
    np.testing.assert_array_equal(rgba[:, :, 3], expected_mask)
    assert (rgba[35:65, 35:65, 3] == 255).all()
    assert not rgba[:20, :, 3].any()
    assert not rgba[80:, :, 3].any()


def test_uniform_image_becomes_fully_transparent(tmp_path):
    src = tmp_path / "flat.png"
    cv2.imwrite(str(src), np.full((24, 36, 3), 90, dtype=np.uint8))

    result = run_one(src, 5, 50)

    assert result.ok
    rgba = load_rgba(result.output)
    assert rgba.shape == (24, 36, 4)
    assert not rgba[:, :, 3].any()


def test_grayscale_input_is_accepted(tmp_path):
    src = tmp_path / "gray.png"
    gray = np.full((50, 50), 10, dtype=np.uint8)
    gray[15:35, 15:35] = 220
    cv2.imwrite(str(src), gray)

    result = run_one(src, 5, 50)

    assert result.ok
    assert load_rgba(result.output).shape == (50, 50, 4)


@pytest.mark.parametrize("content", [b"", b"not an image at all", b"\x89PNG\r\n\x1a\n\x00\x00"])
def test_unreadable_input_is_skipped(tmp_path, content):
    src = tmp_path / "broken.png"
    src.write_bytes(content)

    result = run_one(src, 5, 50)

    assert result.status is ProcessStatus.UNREADABLE
    assert result.output is None
    assert outputs_for(src) == []


@pytest.mark.parametrize("ext", [".jpg", ".png"])
def test_truncated_image_is_skipped(tmp_path, ext):
    rng = np.random.default_rng(11)
    img = rng.integers(0, 256, size=(200, 200, 3), dtype=np.uint8)
    ok, encoded = cv2.imencode(ext, img)
    assert ok
    data = encoded.tobytes()
    src = tmp_path / f"cut{ext}"
    src.write_bytes(data[:len(data) // 2])

    assert read_image(src) is None

    result = run_one(src, 5, 50)

    assert result.status is ProcessStatus.UNREADABLE
    assert result.output is None
    assert outputs_for(src) == []


def test_unwritable_output_is_skipped(tmp_path, monkeypatch):
    src = tmp_path / "square.png"
    write_square(src)
    target = tmp_path / "no-such-dir" / "out.png"
    monkeypatch.setattr(pipeline, "output_path_for", lambda path: target)

    result = run_one(src, 5, 50)

    assert result.status is ProcessStatus.UNWRITABLE
    assert not target.exists()


def test_batch_survives_bad_files(tmp_path):
    good = [tmp_path / f"img{i}.png" for i in range(5)]
    for i, path in enumerate(good):
        write_blob(path, i)
    bad = tmp_path / "truncated.jpg"
    ok, encoded = cv2.imencode(".jpg", np.random.default_rng(5).integers(0, 256, (120, 160, 3), dtype=np.uint8))
    assert ok
    bad.write_bytes(encoded.tobytes()[:encoded.size // 2])
    files = good[:2] + [bad] + good[2:]

    results = run_batch(files, 5, 50, split_threshold=2, max_workers=3)

    assert [r.source for r in results] == files
    assert [r.ok for r in results] == [True, True, False, True, True, True]
    for path in good:
        assert len(outputs_for(path)) == 1
    assert outputs_for(bad) == []


def test_batch_output_independent_of_splitting(tmp_path):
    names = [f"img{i}.png" for i in range(12)]
    coarse = tmp_path / "coarse"
    fine = tmp_path / "fine"
    coarse.mkdir()
    for i, name in enumerate(names):
        write_blob(coarse / name, i)
    shutil.copytree(coarse, fine)

    run_batch([coarse / n for n in names], 5, 50, split_threshold=8, max_workers=1)
    run_batch([fine / n for n in names], 5, 50, split_threshold=1, max_workers=4)

    for name in names:
        (a,) = outputs_for(coarse / name)
        (b,) = outputs_for(fine / name)
        np.testing.assert_array_equal(load_rgba(a), load_rgba(b))


def test_remove_backgrounds_returns_nothing(tmp_path, caplog):
    src = tmp_path / "square.png"
    write_square(src)

    with caplog.at_level(logging.INFO):
        assert remove_backgrounds([src], 5, 50) is None

    assert len(outputs_for(src)) == 1
    assert "Successful: 1" in caplog.text


# ----------------------------------------------------------------------
# Command line
# ----------------------------------------------------------------------

def test_cli_without_arguments_exits_with_usage():
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1


def test_cli_without_existing_files_fails(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["-i", str(tmp_path / "missing.png")])
    assert exc.value.code == 1


def test_cli_single_threshold_falls_back_to_defaults(tmp_path, caplog):
    src = tmp_path / "square.png"
    write_square(src)

    with caplog.at_level(logging.INFO):
        main(["-t", "12", "-i", str(src), "--no-shuffle"])

    assert "low=5.0, high=50.0" in caplog.text
    (out,) = outputs_for(src)
    img = read_image(src)
    np.testing.assert_array_equal(load_rgba(out)[:, :, 3], build_mask(detect_edges(img, 5, 50)))


def test_cli_processes_duplicates_once(tmp_path):
    a = tmp_path / "a.png"
    b = tmp_path / "b.png"
    write_square(a)
    write_blob(b, 1)

    main(["-t", "50", "5", "-i", str(a), str(b), str(a), "-w", "2", "--split-threshold", "1"])

    assert len(outputs_for(a)) == 1
    assert len(outputs_for(b)) == 1
