"""ドロップされた画像・判定結果・履歴を保持するセッション。

GUIはこのオブジェクトのスナップショットを描画するだけで、状態は持たない。
ペア辞書の変更はセッションを作成したスレッド（GUIのメインスレッド）からのみ行う。
別スレッドで受け取ったドロップは enqueue_dropped() でキューに積み、
メインスレッドが drain_pending() で取り込む。
"""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger

from focus_resizer.errors import SaveDestinationFailure
from focus_resizer.history import HistoryEntry, HistoryLog
from focus_resizer.image_save_pipeline import SaveResult, copy_to_destination
from focus_resizer.pairing import PairingMap
from focus_resizer.resize_core import ClassificationResult, TooLarge, classify_image
from focus_resizer.settings import ResizeSettings


@dataclass(frozen=True)
class PairRow:
    """一覧1行分の表示用データ"""

    base_name: str
    original: Optional[Path]
    focused: Optional[Path]
    result: Optional[ClassificationResult] = None


class SessionState:
    def __init__(self, settings: Optional[ResizeSettings] = None) -> None:
        self.settings = settings or ResizeSettings()
        self.pairing = PairingMap(
            policy=self.settings.base_name_policy,
            prefix=self.settings.focused_prefix,
        )
        self.history = HistoryLog()
        self._results: Tuple[ClassificationResult, ...] = ()
        self._pending: "queue.Queue[Path]" = queue.Queue()
        self._owner_thread_id = threading.get_ident()

    def _ensure_owner_thread(self, operation: str) -> None:
        if threading.get_ident() != self._owner_thread_id:
            raise RuntimeError(f"{operation} はセッションを作成したスレッドから呼び出してください")

    @property
    def has_references(self) -> bool:
        return bool(self.pairing.references)

    @property
    def results(self) -> Tuple[ClassificationResult, ...]:
        """直近の実行結果"""
        return self._results

    def add_reference(self, path: Path) -> str:
        """ドロップされた参照を1件取り込み、ベース名を返す。"""
        self._ensure_owner_thread("add_reference")
        base_name = self.pairing.resolve(Path(path))
        logger.debug(f"参照を追加: {Path(path).name} -> {base_name}")
        return base_name

    def enqueue_dropped(self, paths: Iterable[Path]) -> None:
        """任意のスレッドからドロップを受け付ける。"""
        for path in paths:
            self._pending.put(Path(path))

    def drain_pending(self) -> List[str]:
        """キューに溜まったドロップをメインスレッドで取り込む。"""
        self._ensure_owner_thread("drain_pending")
        added: List[str] = []
        while True:
            try:
                path = self._pending.get_nowait()
            except queue.Empty:
                break
            added.append(self.add_reference(path))
        return added

    def check_and_resize(self, now: Optional[datetime] = None) -> HistoryEntry:
        """全オリジナル画像を判定し、結果を履歴へ追記する。"""
        self._ensure_owner_thread("check_and_resize")
        originals = self.pairing.originals()
        logger.info(f"チェック＆リサイズ開始: 対象 {len(originals)}件 / 上限 {self.settings.max_pixel_area:,}px")

        results = [classify_image(path, self.settings) for path in originals]
        self._results = tuple(results)
        entry = self.history.append(self._results, timestamp=now)

        logger.info(
            f"チェック＆リサイズ完了: {len(results)}件 / リサイズ {entry.resized_count}件 / 失敗 {entry.failed_count}件"
        )
        return entry

    def result_for(self, original: Path) -> Optional[ClassificationResult]:
        return self._result_lookup().get(Path(original))

    def _result_lookup(self) -> Dict[Path, ClassificationResult]:
        return {result.source: result for result in self._results}

    def merged_rows(self) -> List[PairRow]:
        """ペア情報と直近の結果を合わせた一覧（ベース名順）"""
        lookup = self._result_lookup()
        rows: List[PairRow] = []
        for base_name, pair in self.pairing.pairs():
            result = lookup.get(pair.original) if pair.original is not None else None
            rows.append(PairRow(base_name=base_name, original=pair.original, focused=pair.focused, result=result))
        return rows

    @staticmethod
    def can_offer_download(row: PairRow) -> bool:
        """Focused版が無く、リサイズ済みの行だけ保存ボタンを出す。"""
        return isinstance(row.result, TooLarge) and row.focused is None

    def save_resized(self, original: Path, destination: Path) -> SaveResult:
        """リサイズ済みPNGをユーザー指定先へコピーする。"""
        result = self.result_for(original)
        if not isinstance(result, TooLarge):
            raise SaveDestinationFailure(
                f"リサイズ済みの画像がありません: {Path(original).name}",
                path=Path(destination),
                category="not_resized",
            )

        saved = copy_to_destination(result.resized_path, Path(destination))
        if not saved.success:
            raise SaveDestinationFailure(
                f"画像の保存に失敗しました: {saved.error}",
                path=saved.output_path,
                category=saved.error_category or "unknown",
                guidance=saved.error_guidance,
            )
        return saved

    def clear(self) -> None:
        """ペアと直近の結果をクリアする。履歴は残す。"""
        self._ensure_owner_thread("clear")
        self.pairing.clear()
        self._results = ()
