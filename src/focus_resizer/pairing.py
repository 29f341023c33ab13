"""
オリジナル画像と "Focused " 画像の対応付け

ドロップされたファイル名からベース名を求め、同じベース名を持つ
オリジナルとFocused版を1組として管理します。
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterator, List, Literal, Optional, Tuple

from loguru import logger

from focus_resizer.settings import DEFAULT_FOCUSED_PREFIX, BaseNamePolicy

ImageRole = Literal["original", "focused"]


@dataclass(frozen=True)
class ImagePair:
    """同じベース名を持つオリジナル/Focusedの組"""

    original: Optional[Path] = None
    focused: Optional[Path] = None

    def with_role(self, role: ImageRole, path: Path) -> "ImagePair":
        if role == "focused":
            return replace(self, focused=path)
        return replace(self, original=path)


def is_focused_name(name: str, prefix: str = DEFAULT_FOCUSED_PREFIX) -> bool:
    """ファイル名が Focused プレフィックス（大文字小文字を区別しない）で始まるか"""
    return name.lower().startswith(prefix.lower())


def derive_base_name(
    name: str,
    policy: BaseNamePolicy = "strip-extension",
    prefix: str = DEFAULT_FOCUSED_PREFIX,
) -> Tuple[str, ImageRole]:
    """
    表示名からベース名と役割を求めます

    Args:
        name: ファイルの表示名（例: "Focused cat.png"）
        policy: 拡張子を除去するかどうか
        prefix: Focused版を示すプレフィックス（末尾の空白を含む）

    Returns:
        (ベース名, 役割)
    """
    role: ImageRole = "original"
    working_name = name
    if is_focused_name(name, prefix):
        working_name = name[len(prefix):]
        role = "focused"

    if policy == "strip-extension":
        # "archive.tar.gz" -> "archive.tar", ".hidden" はそのまま
        working_name = Path(working_name).stem if working_name else working_name
    return working_name, role


class PairingMap:
    """ベース名をキーにしたペアの辞書（後から来た同じ役割は上書き）"""

    def __init__(
        self,
        policy: BaseNamePolicy = "strip-extension",
        prefix: str = DEFAULT_FOCUSED_PREFIX,
    ) -> None:
        self.policy = policy
        self.prefix = prefix
        self._pairs: Dict[str, ImagePair] = {}
        self._references: List[Path] = []

    def resolve(self, path: Path) -> str:
        """参照を1件取り込み、対応するベース名を返す。"""
        path = Path(path)
        base_name, role = derive_base_name(path.name, self.policy, self.prefix)
        current = self._pairs.get(base_name, ImagePair())
        previous = current.focused if role == "focused" else current.original
        if previous is not None and previous != path:
            logger.debug(f"同じベース名の{role}を上書き: {base_name} ({previous} -> {path})")

        self._pairs[base_name] = current.with_role(role, path)
        self._references.append(path)
        return base_name

    def get(self, base_name: str) -> Optional[ImagePair]:
        return self._pairs.get(base_name)

    def pairs(self) -> List[Tuple[str, ImagePair]]:
        """ベース名順に並べたペア一覧"""
        return sorted(self._pairs.items(), key=lambda item: item[0])

    def originals(self) -> List[Path]:
        """処理対象となるオリジナル画像の一覧"""
        return [pair.original for _, pair in self.pairs() if pair.original is not None]

    @property
    def references(self) -> Tuple[Path, ...]:
        """ドロップされた全参照（ドロップ順）"""
        return tuple(self._references)

    def clear(self) -> None:
        self._pairs.clear()
        self._references.clear()

    def __len__(self) -> int:
        return len(self._pairs)

    def __contains__(self, base_name: object) -> bool:
        return base_name in self._pairs

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._pairs))
