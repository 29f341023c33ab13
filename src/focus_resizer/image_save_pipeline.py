"""リサイズ結果のPNG保存と、保存先へのコピー。

一時フォルダへの書き出しとユーザー指定先へのコピーの両方で、
アトミックな置換とOSエラーの分類を共通化する。
"""

from __future__ import annotations

from dataclasses import dataclass
import errno
import os
import shutil
import time
from pathlib import Path
import uuid
from typing import Any, Dict, Optional, Tuple

from loguru import logger
from PIL import Image

OUTPUT_SUFFIX = ".png"
DOWNLOAD_PREFIX = "Focused "
PNG_COMPRESS_LEVEL = 6

_WINDOWS_LONG_PATH_PREFIX = 260

_WINDOWS_RETRYABLE_CODES = {32, 33}
_WINDOWS_UNSUPPORTED_CODES = {3, 80, 123, 995, 1088}

_POSIX_INVALID_PATH_CODES = {errno.EINVAL, errno.ENOTDIR}
_POSIX_NO_SPACE_CODES = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}
_POSIX_PERMISSION_CODES = {errno.EACCES, errno.EPERM, errno.EROFS}


@dataclass(frozen=True)
class SaveResult:
    success: bool
    output_path: Path
    size: Optional[Tuple[int, int]] = None
    error: Optional[str] = None
    error_code: Optional[int] = None
    error_category: Optional[str] = None
    retryable: bool = False
    error_guidance: Optional[str] = None


def _normalize_windows_long_path(path: Path) -> Path:
    """Windowsの長いパス向けに `\\\\?\\` プレフィックスを付与する。

    260文字を超える場合は先にプレフィックスを付けることで
    `File name too long` 系の失敗を回避しやすくする。
    """
    if os.name != "nt":
        return path

    path_str = os.path.abspath(str(path))
    if path_str.startswith("\\\\?\\"):
        return Path(path_str)

    if len(path_str) < _WINDOWS_LONG_PATH_PREFIX - 4:
        return Path(path_str)

    if path_str.startswith("\\\\"):
        return Path("\\\\?\\UNC\\" + path_str[2:])

    return Path("\\\\?\\" + path_str)


def _build_temp_save_path(target_path: Path) -> Path:
    """同一ディレクトリ内の一時保存パスを作る。"""
    base_name = target_path.name or "focus_output"
    token = f"{os.getpid()}_{time.time_ns()}_{uuid.uuid4().hex[:10]}"
    return target_path.with_name(f".{base_name}.{token}.tmp")


def analyze_file_error(error: BaseException) -> Tuple[Optional[int], str, bool, str]:
    """ファイル保存に使えるエラー分類を返す。

    Returns:
        (error_code, error_category, retryable, guidance)
    """
    if not isinstance(error, OSError):
        return None, "unknown", False, "再試行しても解決しない場合は画像ファイルの破損や権限を確認してください。"

    win_error = getattr(error, "winerror", None)
    errno_code = getattr(error, "errno", None)

    if os.name == "nt" and win_error:
        code = int(win_error)
        if code in _WINDOWS_RETRYABLE_CODES:
            return (
                code,
                "sharing_violation",
                True,
                "他のアプリによるロックが疑われます。数秒後に再試行するか、関連アプリを閉じてください。",
            )
        if code == 206:
            return code, "path_too_long", False, "保存先のパスが長すぎる可能性があります。保存先を短いパスに変更してください。"
        if code == 5:
            return code, "permission_denied", False, "保存先のアクセス権限が不足しています。書き込み権限を確認してください。"
        if code == 2:
            return code, "not_found", False, "保存先フォルダが見つからないため保存できません。保存先フォルダを確認してください。"
        if code in _WINDOWS_UNSUPPORTED_CODES:
            return (
                code,
                "path_invalid",
                False,
                "ファイル名・パス文字列を確認してください（予約語/不正文字が含まれる可能性）。",
            )
        if code in {28, 122, 112}:
            return code, "no_space", False, "保存先の空き容量不足が疑われます。空き容量を確認してください。"
        return code, "windows_os_error", False, "Windows側のI/Oエラーが発生しました。保存先を変更して再試行してください。"

    # ここから先は errno（POSIX の番号）として扱う
    if not isinstance(errno_code, int):
        return None, "unknown", False, "再試行しても解決しない場合は保存先を変更してください。"

    code = int(errno_code)
    if code == errno.ENOENT:
        return code, "not_found", False, "保存先フォルダが見つからないため保存できません。保存先フォルダを確認してください。"
    if code == errno.EISDIR:
        return code, "is_directory", False, "保存先が既存のフォルダです。ファイル名を変更してください。"
    if code == errno.ENAMETOOLONG:
        return code, "path_too_long", False, "保存先のパスが長すぎる可能性があります。保存先を短いパスに変更してください。"
    if code in _POSIX_INVALID_PATH_CODES:
        return (
            code,
            "path_invalid",
            False,
            "ファイル名・パス文字列を確認してください（予約語/不正文字が含まれる可能性）。",
        )
    if code in _POSIX_NO_SPACE_CODES:
        return code, "no_space", False, "保存先の空き容量不足が疑われます。空き容量を確認してください。"
    if code in _POSIX_PERMISSION_CODES:
        return code, "permission_denied", False, "権限設定をご確認ください。"

    return code, "unknown", False, "再試行しても解決しない場合は保存先を変更してください。"


def _failure_result(error: BaseException, output_path: Path) -> SaveResult:
    error_code, error_category, retryable, guidance = analyze_file_error(error)
    return SaveResult(
        success=False,
        output_path=output_path,
        error=str(error),
        error_code=error_code,
        error_category=error_category,
        retryable=retryable,
        error_guidance=guidance,
    )


def _cleanup_temp(tmp_path: Path) -> None:
    if tmp_path.exists():
        try:
            tmp_path.unlink()
        except OSError:
            logger.warning(f"一時保存ファイルの削除に失敗: {tmp_path}")


def _save_with_atomic_replace(
    save_img: Image.Image,
    final_path: Path,
    save_kwargs: Dict[str, Any],
) -> None:
    """保存を一時ファイル→置換で実行し、壊れた最終ファイルを防ぐ。"""
    tmp_path = _build_temp_save_path(final_path)
    try:
        # 一時ファイルの拡張子は .tmp なので format を明示しておく
        save_img.save(tmp_path, **save_kwargs)
        os.replace(str(tmp_path), str(final_path))
    finally:
        _cleanup_temp(tmp_path)


def build_png_save_kwargs(*, optimize: bool = True) -> Dict[str, Any]:
    """PNG（ロスレス）のエンコーダ設定を返す。"""
    return {
        "format": "PNG",
        "optimize": optimize,
        "compress_level": PNG_COMPRESS_LEVEL,
    }


def destination_with_png_extension(base_path: Path) -> Path:
    """拡張子を .png に揃える。"""
    return base_path.with_suffix(OUTPUT_SUFFIX)


def suggest_download_name(resized_path: Path) -> str:
    """保存ダイアログの初期ファイル名（"Focused <name>.png"）"""
    return f"{DOWNLOAD_PREFIX}{destination_with_png_extension(Path(resized_path)).name}"


def save_png(image: Image.Image, output_path: Path) -> SaveResult:
    """画像をRGBA 8bit/チャンネルのPNGとして保存する。"""
    final_path = destination_with_png_extension(Path(output_path))
    save_img = image if image.mode == "RGBA" else image.convert("RGBA")
    write_target = _normalize_windows_long_path(final_path)

    try:
        _save_with_atomic_replace(
            save_img=save_img,
            final_path=write_target,
            save_kwargs=build_png_save_kwargs(),
        )
    except (OSError, ValueError) as e:
        logger.error(f"PNG保存に失敗しました: {final_path} ({e})")
        return _failure_result(e, final_path)

    logger.debug(f"PNG保存: {final_path} ({save_img.width}x{save_img.height})")
    return SaveResult(success=True, output_path=final_path, size=save_img.size)


def copy_to_destination(source_path: Path, destination: Path) -> SaveResult:
    """一時フォルダのPNGをユーザー指定の保存先へコピーする。"""
    source_path = Path(source_path)
    destination = Path(destination)
    if destination.exists() and destination.is_dir():
        return _failure_result(IsADirectoryError(21, "保存先が既存のフォルダです", str(destination)), destination)

    write_target = _normalize_windows_long_path(destination)
    tmp_path = _build_temp_save_path(write_target)
    try:
        shutil.copyfile(source_path, tmp_path)
        os.replace(str(tmp_path), str(write_target))
    except OSError as e:
        logger.error(f"保存先へのコピーに失敗しました: {source_path} -> {destination} ({e})")
        return _failure_result(e, destination)
    finally:
        _cleanup_temp(tmp_path)

    logger.info(f"画像を保存しました: {destination}")
    return SaveResult(success=True, output_path=destination)
