from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from focus_resizer.resize_core import (
    Acceptable,
    Failed,
    TooLarge,
    classify_image,
    compute_scaled_size,
    compute_target_size,
    load_image,
    resized_output_path,
    status_of,
)
from focus_resizer.errors import DecodeFailure
from focus_resizer.settings import ResizeSettings


def test_compute_scaled_size_reference_case():
    assert compute_scaled_size(1000, 900, 300_000) == (577, 520)


def test_compute_scaled_size_within_limit_returns_none():
    assert compute_scaled_size(800, 600, 750_000) is None
    # 上限ちょうどはリサイズしない
    assert compute_scaled_size(600, 500, 300_000) is None


@pytest.mark.parametrize(
    "width,height",
    [(1000, 900), (4000, 3000), (1920, 1080), (1080, 1920), (12345, 6789), (601, 500)],
)
def test_compute_scaled_size_keeps_area_and_aspect(width, height):
    max_area = 300_000
    new_width, new_height = compute_scaled_size(width, height, max_area)

    # 各辺の丸め誤差（最大1px）を除けば上限以内
    assert (new_width - 1) * (new_height - 1) <= max_area
    assert abs(new_width / new_height - width / height) < 0.01


def test_compute_scaled_size_never_returns_zero_dimension():
    new_width, new_height = compute_scaled_size(100_000, 2, 1_000)
    assert new_height >= 1
    assert new_width >= 1


def test_compute_target_size_fixed_target_policy():
    settings = ResizeSettings(resize_policy="fixed-target", fixed_target_size=(400, 300))
    assert compute_target_size((800, 600), settings) == (400, 300)
    # 縦横比は考慮しない
    assert compute_target_size((100, 900), settings) == (400, 300)
    assert compute_target_size((400, 300), settings) is None


def test_classify_large_image_is_resized(sample_images, settings, resized_dir):
    result = classify_image(sample_images["large"], settings)

    assert isinstance(result, TooLarge)
    assert status_of(result) == "too_large"
    assert result.source == sample_images["large"]
    assert result.original_size == (1000, 900)
    assert result.resized_size == (577, 520)
    assert result.resized_path == resized_dir / "cat.png"
    assert result.resized_path.exists()

    with Image.open(result.resized_path) as output:
        assert output.format == "PNG"
        assert output.mode == "RGBA"
        assert output.size == (577, 520)


def test_classify_acceptable_image_writes_nothing(sample_images, resized_dir):
    settings = ResizeSettings(max_pixel_area=750_000, temp_dir=resized_dir)

    result = classify_image(sample_images["medium"], settings)

    assert isinstance(result, Acceptable)
    assert status_of(result) == "acceptable"
    assert result.size == (800, 600)
    assert list(resized_dir.iterdir()) == []


def test_classify_jpeg_source_is_written_as_png(sample_images, resized_dir):
    settings = ResizeSettings(max_pixel_area=100_000, temp_dir=resized_dir)

    result = classify_image(sample_images["medium"], settings)

    assert isinstance(result, TooLarge)
    assert result.resized_path == resized_dir / "dog.png"
    assert resized_output_path(sample_images["medium"], settings) == result.resized_path


@pytest.mark.parametrize("key", ["empty", "not_image"])
def test_classify_unreadable_file_fails_without_raising(sample_images, settings, resized_dir, key):
    result = classify_image(sample_images[key], settings)

    assert isinstance(result, Failed)
    assert status_of(result) == "failed"
    assert result.stage == "decode"
    assert result.message
    assert list(resized_dir.iterdir()) == []


def test_classify_missing_file_fails(temp_dir, settings):
    result = classify_image(temp_dir / "missing.png", settings)

    assert isinstance(result, Failed)
    assert result.stage == "decode"
    assert "見つかりません" in result.message


def test_classify_write_failure_is_reported_separately(sample_images, temp_dir):
    settings = ResizeSettings(max_pixel_area=300_000, temp_dir=temp_dir / "does-not-exist")

    result = classify_image(sample_images["large"], settings)

    assert isinstance(result, Failed)
    assert result.stage == "write"
    assert result.category == "not_found"
    assert result.guidance


def test_classify_fixed_target_policy(sample_images, resized_dir):
    settings = ResizeSettings(
        resize_policy="fixed-target",
        fixed_target_size=(320, 200),
        temp_dir=resized_dir,
    )

    result = classify_image(sample_images["small"], settings)

    assert isinstance(result, TooLarge)
    assert result.resized_size == (320, 200)


def test_classify_is_idempotent(sample_images, settings):
    first = classify_image(sample_images["portrait"], settings)
    with Image.open(first.resized_path) as output:
        first_pixels = output.tobytes()

    second = classify_image(sample_images["portrait"], settings)
    with Image.open(second.resized_path) as output:
        second_pixels = output.tobytes()

    assert type(first) is type(second) is TooLarge
    assert first.resized_path == second.resized_path
    assert first.resized_size == second.resized_size
    assert first_pixels == second_pixels


def test_load_image_raises_decode_failure(sample_images):
    with pytest.raises(DecodeFailure) as excinfo:
        load_image(sample_images["not_image"])
    assert excinfo.value.path == sample_images["not_image"]
    assert excinfo.value.category == "decode"


def test_load_image_applies_exif_orientation(temp_dir):
    path = temp_dir / "rotated.jpg"
    exif = Image.Exif()
    exif[0x0112] = 6  # 90度回転
    Image.new("RGB", (200, 100), (10, 20, 30)).save(path, "JPEG", exif=exif.tobytes())

    image = load_image(Path(path))

    assert image.size == (100, 200)


def test_resized_output_path_follows_base_name_policy(temp_dir):
    strip = ResizeSettings(temp_dir=temp_dir)
    keep = ResizeSettings(temp_dir=temp_dir, base_name_policy="keep-extension")

    assert resized_output_path(temp_dir / "photo.jpg", strip) == temp_dir / "photo.png"
    assert resized_output_path(temp_dir / "photo.png", keep) == temp_dir / "photo.png.png"
    assert resized_output_path(temp_dir / "photo.jpg", keep) == temp_dir / "photo.jpg.png"


def test_classify_out_of_memory_during_decode_is_decode_failure(sample_images, settings, resized_dir, monkeypatch):
    def exhausted(*_args, **_kwargs):
        raise MemoryError()

    monkeypatch.setattr(Image, "open", exhausted)

    result = classify_image(sample_images["large"], settings)

    assert isinstance(result, Failed)
    assert result.stage == "decode"
    assert result.category == "memory"
    assert "メモリ不足" in result.message
    assert list(resized_dir.iterdir()) == []
