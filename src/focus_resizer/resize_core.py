#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
画像サイズ判定・リサイズのコア機能モジュール

ピクセル面積（幅×高さ）が上限を超える画像を、縦横比を保ったまま
上限内へ縮小し、一時フォルダへPNGとして書き出します。
GUIからは classify_image() だけを呼び出します。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, Tuple, Union

from loguru import logger
from PIL import Image, ImageOps, UnidentifiedImageError

from focus_resizer.errors import DecodeFailure, WriteFailure, describe_error
from focus_resizer.image_save_pipeline import OUTPUT_SUFFIX, save_png
from focus_resizer.pairing import derive_base_name
from focus_resizer.settings import ResizeSettings

ImageStatus = Literal["acceptable", "too_large", "failed"]
FailureStage = Literal["decode", "write"]


@dataclass(frozen=True)
class Acceptable:
    """上限以内のためリサイズ不要"""

    source: Path
    size: Tuple[int, int]


@dataclass(frozen=True)
class TooLarge:
    """上限超過のためリサイズし、一時フォルダへ保存済み"""

    source: Path
    resized_path: Path
    original_size: Tuple[int, int]
    resized_size: Tuple[int, int]


@dataclass(frozen=True)
class Failed:
    """読み込みまたは書き出しに失敗"""

    source: Path
    stage: FailureStage
    message: str
    category: str = "unknown"
    guidance: Optional[str] = None


ClassificationResult = Union[Acceptable, TooLarge, Failed]


def status_of(result: ClassificationResult) -> ImageStatus:
    if isinstance(result, Acceptable):
        return "acceptable"
    if isinstance(result, TooLarge):
        return "too_large"
    return "failed"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_scaled_size(width: int, height: int, max_pixel_area: int) -> Optional[Tuple[int, int]]:
    """
    面積が上限を超える場合の縮小後サイズを計算します

    Args:
        width: 元の幅
        height: 元の高さ
        max_pixel_area: 許容する最大ピクセル面積

    Returns:
        (新しい幅, 新しい高さ)。リサイズ不要なら None
    """
    area = width * height
    if area <= max_pixel_area:
        return None

    scale_factor = math.sqrt(max_pixel_area / area)
    new_width = max(1, _round_half_up(width * scale_factor))
    new_height = max(1, _round_half_up(height * scale_factor))
    return new_width, new_height


def compute_target_size(size: Tuple[int, int], settings: ResizeSettings) -> Optional[Tuple[int, int]]:
    """設定のリサイズ方式に従って出力サイズを決める。None はリサイズ不要。"""
    width, height = size
    if settings.resize_policy == "fixed-target":
        target = tuple(settings.fixed_target_size)
        if target == (width, height):
            return None
        return target[0], target[1]
    return compute_scaled_size(width, height, settings.max_pixel_area)


def load_image(path: Path) -> Image.Image:
    """画像を読み込み、EXIFの向きを反映して返す。失敗時は DecodeFailure。"""
    path = Path(path)
    try:
        with Image.open(path) as opened:
            opened.load()
            # 戻り値は常に新しい画像（ファイルを閉じた後も使える）
            image = ImageOps.exif_transpose(opened)
    except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as e:
        logger.warning(f"画像を読み込めません: {path} ({e})")
        raise DecodeFailure(describe_error(e), path=path, category="decode") from e
    except MemoryError as e:
        logger.error(f"読み込み中にメモリ不足: {path}")
        raise DecodeFailure(describe_error(e), path=path, category="memory") from e

    if image.width <= 0 or image.height <= 0:
        raise DecodeFailure(f"画像サイズが不正です: {image.width}x{image.height}", path=path, category="decode")
    return image


def resize_to(image: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """RGBAへ変換してLANCZOSで1回だけリサンプリングする。"""
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    return rgba.resize(size, Image.Resampling.LANCZOS)


def resized_output_path(source: Path, settings: ResizeSettings) -> Path:
    """一時フォルダ内の出力先（ペアリングと同じベース名 + .png）"""
    base_name, _role = derive_base_name(Path(source).name, settings.base_name_policy, settings.focused_prefix)
    return settings.temp_dir / f"{base_name}{OUTPUT_SUFFIX}"


def _persist(resized: Image.Image, output_path: Path) -> Path:
    result = save_png(resized, output_path)
    if not result.success:
        raise WriteFailure(
            f"リサイズ画像の保存に失敗しました: {result.error}",
            path=result.output_path,
            category=result.error_category or "unknown",
            guidance=result.error_guidance,
        )
    return result.output_path


def classify_image(source: Path, settings: Optional[ResizeSettings] = None) -> ClassificationResult:
    """
    1枚の画像を判定し、必要ならリサイズして保存します

    ファイル単位の失敗は例外として送出せず Failed を返します。

    Args:
        source: オリジナル画像のパス
        settings: 判定に使う設定（省略時はデフォルト）

    Returns:
        ClassificationResult: Acceptable / TooLarge / Failed
    """
    settings = settings or ResizeSettings()
    source = Path(source)

    try:
        image = load_image(source)
    except DecodeFailure as e:
        return Failed(source=source, stage="decode", message=str(e), category=e.category, guidance=e.guidance)

    original_size = image.size
    target_size = compute_target_size(original_size, settings)
    if target_size is None:
        logger.debug(f"リサイズ不要: {source.name} ({original_size[0]}x{original_size[1]})")
        return Acceptable(source=source, size=original_size)

    logger.info(
        f"リサイズ: {source.name} {original_size[0]}x{original_size[1]} -> {target_size[0]}x{target_size[1]}"
    )
    try:
        resized = resize_to(image, target_size)
        resized_path = _persist(resized, resized_output_path(source, settings))
    except WriteFailure as e:
        return Failed(source=source, stage="write", message=str(e), category=e.category, guidance=e.guidance)
    except MemoryError as e:
        return Failed(source=source, stage="write", message=describe_error(e), category="memory")

    return TooLarge(
        source=source,
        resized_path=resized_path,
        original_size=original_size,
        resized_size=resized.size,
    )
