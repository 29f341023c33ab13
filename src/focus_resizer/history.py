"""
処理履歴（メモリ内のみ・追記専用）
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator, List, Optional, Tuple

from focus_resizer.resize_core import ClassificationResult, Failed, TooLarge


@dataclass(frozen=True)
class HistoryEntry:
    """1回の「チェック＆リサイズ」実行の記録"""
    timestamp: datetime
    results: Tuple[ClassificationResult, ...]

    @property
    def resized_count(self) -> int:
        return sum(1 for result in self.results if isinstance(result, TooLarge))

    @property
    def failed_count(self) -> int:
        return sum(1 for result in self.results if isinstance(result, Failed))


class HistoryLog:
    """履歴マネージャー（削除・変更なし）"""

    def __init__(self) -> None:
        self._entries: List[HistoryEntry] = []

    def append(
        self,
        results: Iterable[ClassificationResult],
        timestamp: Optional[datetime] = None,
    ) -> HistoryEntry:
        """履歴エントリを追加"""
        entry = HistoryEntry(timestamp=timestamp or datetime.now(), results=tuple(results))
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    @property
    def latest(self) -> Optional[HistoryEntry]:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(tuple(self._entries))
