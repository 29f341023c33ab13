#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
pytest設定ファイル
共通のフィクスチャやテスト設定を定義
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from PIL import Image

from focus_resizer.settings import ResizeSettings


@pytest.fixture
def temp_dir():
    """一時ディレクトリを作成・削除するフィクスチャ"""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def resized_dir(temp_dir):
    """リサイズ結果の書き出し先"""
    path = temp_dir / "resized"
    path.mkdir()
    return path


@pytest.fixture
def settings(resized_dir):
    """上限 300,000px の設定"""
    return ResizeSettings(max_pixel_area=300_000, temp_dir=resized_dir)


@pytest.fixture
def sample_images(temp_dir):
    """様々なサイズ・状態のサンプル画像を作成するフィクスチャ"""
    source_dir = temp_dir / "source"
    source_dir.mkdir()
    images = {}

    # 上限超過（1000x900 = 900,000px）
    large_path = source_dir / "cat.png"
    Image.new("RGB", (1000, 900), color=(255, 0, 0)).save(large_path, "PNG")
    images["large"] = large_path

    # 上限以内（800x600 = 480,000px、上限750,000なら適正）
    medium_path = source_dir / "dog.jpg"
    Image.new("RGB", (800, 600), color=(0, 255, 0)).save(medium_path, "JPEG", quality=90)
    images["medium"] = medium_path

    # 小さい画像（リサイズ不要）
    small_path = source_dir / "small.png"
    Image.new("RGBA", (100, 100), color=(0, 0, 255, 128)).save(small_path, "PNG")
    images["small"] = small_path

    # 縦長・グラデーション（リサンプル結果の比較用）
    portrait_path = source_dir / "portrait.png"
    gradient = Image.linear_gradient("L").resize((600, 1200)).convert("RGB")
    gradient.save(portrait_path, "PNG")
    images["portrait"] = portrait_path

    # Focused版
    focused_path = source_dir / "Focused cat.png"
    Image.new("RGB", (500, 450), color=(128, 0, 0)).save(focused_path, "PNG")
    images["focused"] = focused_path

    # 0バイトの .png
    empty_path = source_dir / "empty.png"
    empty_path.write_bytes(b"")
    images["empty"] = empty_path

    # 画像ではない .jpg
    text_path = source_dir / "notes.jpg"
    text_path.write_text("これは画像ではありません", encoding="utf-8")
    images["not_image"] = text_path

    return images
