"""Pure text builders for list rows, history sidebar and status labels."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from focus_resizer.history import HistoryEntry
from focus_resizer.resize_core import Acceptable, ClassificationResult, Failed, TooLarge
from focus_resizer.session import PairRow

STATUS_LABELS = {
    "acceptable": "適正サイズ",
    "too_large": "サイズ超過",
    "failed": "失敗",
}


def build_status_label(result: ClassificationResult) -> str:
    """Build short status label shown next to a file name."""
    if isinstance(result, Acceptable):
        return STATUS_LABELS["acceptable"]
    if isinstance(result, TooLarge):
        return STATUS_LABELS["too_large"]
    if result.stage == "write":
        return "保存失敗"
    return "読み込み失敗"


def build_result_line(result: ClassificationResult) -> str:
    return f"{result.source.name} - {build_status_label(result)}"


def build_original_cell_text(row: PairRow) -> str:
    """Build left column text (original name and status)."""
    if row.original is None:
        return "オリジナル画像なし"
    if row.result is None:
        return row.original.name
    text = build_result_line(row.result)
    if isinstance(row.result, TooLarge):
        width, height = row.result.resized_size
        text += f" ({width}x{height})"
    return text


def build_focused_cell_text(row: PairRow) -> str:
    return row.focused.name if row.focused is not None else ""


def build_failure_detail(result: Failed) -> str:
    lines = [result.message]
    if result.guidance:
        lines.append(result.guidance)
    return "\n".join(lines)


def format_history_timestamp(timestamp: datetime) -> str:
    return timestamp.strftime("%Y/%m/%d %H:%M")


def build_history_title(entry: HistoryEntry) -> str:
    return f"処理日時 {format_history_timestamp(entry.timestamp)}"


def build_history_lines(entry: HistoryEntry) -> List[str]:
    """Build one line per result for the history sidebar."""
    if not entry.results:
        return ["（対象画像なし）"]
    return [build_result_line(result) for result in entry.results]


def build_run_status_text(results: Iterable[ClassificationResult]) -> str:
    """Build status bar text after a check-and-resize run."""
    items = list(results)
    if not items:
        return "処理対象のオリジナル画像がありません"
    acceptable = sum(1 for r in items if isinstance(r, Acceptable))
    resized = sum(1 for r in items if isinstance(r, TooLarge))
    failed = sum(1 for r in items if isinstance(r, Failed))
    return f"完了: {len(items)}件 / 適正 {acceptable} / リサイズ {resized} / 失敗 {failed}"


def build_drop_hint_text(*, drag_drop_enabled: bool, reference_count: int) -> str:
    """Build the drop zone text."""
    base = "ここに画像をドラッグ&ドロップ" if drag_drop_enabled else "クリックして画像を選択\n(ドラッグ&ドロップは利用できません)"
    if reference_count <= 0:
        return base
    return f"{base}\n読み込み済み: {reference_count}件"


def build_save_error_text(message: str, guidance: Optional[str]) -> str:
    return f"{message}\n\n{guidance}" if guidance else message
