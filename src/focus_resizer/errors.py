"""
ファイル単位のエラー分類とユーザー向けメッセージ
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from PIL import UnidentifiedImageError


class FocusResizeError(Exception):
    """1ファイル単位で発生するエラーの基底クラス"""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[Path] = None,
        category: str = "unknown",
        guidance: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.category = category
        self.guidance = guidance


class DecodeFailure(FocusResizeError):
    """画像として読み込めない（破損・非対応形式・ファイルなし）"""


class WriteFailure(FocusResizeError):
    """リサイズ後の画像をPNGとして書き出せなかった"""


class SaveDestinationFailure(FocusResizeError):
    """ユーザーが選んだ保存先へのコピーに失敗した"""


def describe_error(error: BaseException) -> str:
    """
    例外から日本語のエラーメッセージを生成します

    Args:
        error: 例外オブジェクト

    Returns:
        str: 日本語エラーメッセージ
    """
    if isinstance(error, FocusResizeError):
        return str(error)

    error_msg = str(error)

    if isinstance(error, FileNotFoundError):
        return f"ファイルが見つかりません: {error_msg}"
    elif isinstance(error, PermissionError):
        return f"アクセス権限がありません: {error_msg}"
    elif isinstance(error, IsADirectoryError):
        return f"ディレクトリが指定されました（ファイルを指定してください）: {error_msg}"

    elif isinstance(error, UnidentifiedImageError):
        return f"画像ファイルとして認識できません: {error_msg}"
    elif type(error).__name__ == "DecompressionBombError":
        return f"画像が大きすぎます（圧縮爆弾の可能性）: {error_msg}"

    elif isinstance(error, OSError):
        if error.errno == 28:  # ENOSPC
            return "ディスク容量が不足しています"
        elif error.errno == 36:  # ENAMETOOLONG
            return "ファイル名が長すぎます"
        return f"システムエラー: {error_msg}"

    elif isinstance(error, MemoryError):
        return "メモリ不足エラー: 画像が大きすぎるか、使用可能なメモリが不足しています"

    return f"{type(error).__name__}: {error_msg}"
