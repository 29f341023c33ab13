from datetime import datetime
from pathlib import Path

from focus_resizer.history import HistoryEntry
from focus_resizer.resize_core import Acceptable, Failed, TooLarge
from focus_resizer.session import PairRow
from focus_resizer.ui_text_presenter import (
    build_drop_hint_text,
    build_failure_detail,
    build_focused_cell_text,
    build_history_lines,
    build_history_title,
    build_original_cell_text,
    build_run_status_text,
    build_save_error_text,
    build_status_label,
)

_ACCEPTABLE = Acceptable(source=Path("/in/dog.jpg"), size=(800, 600))
_TOO_LARGE = TooLarge(
    source=Path("/in/cat.png"),
    resized_path=Path("/tmp/cat.png"),
    original_size=(1000, 900),
    resized_size=(577, 520),
)
_DECODE_FAILED = Failed(source=Path("/in/empty.png"), stage="decode", message="画像ファイルとして認識できません")
_WRITE_FAILED = Failed(
    source=Path("/in/big.png"),
    stage="write",
    message="リサイズ画像の保存に失敗しました",
    guidance="権限設定をご確認ください。",
)


def test_build_status_label() -> None:
    assert build_status_label(_ACCEPTABLE) == "適正サイズ"
    assert build_status_label(_TOO_LARGE) == "サイズ超過"
    assert build_status_label(_DECODE_FAILED) == "読み込み失敗"
    assert build_status_label(_WRITE_FAILED) == "保存失敗"


def test_build_original_cell_text() -> None:
    row = PairRow(base_name="cat", original=Path("/in/cat.png"), focused=None, result=_TOO_LARGE)
    assert build_original_cell_text(row) == "cat.png - サイズ超過 (577x520)"

    pending = PairRow(base_name="dog", original=Path("/in/dog.jpg"), focused=None)
    assert build_original_cell_text(pending) == "dog.jpg"

    focused_only = PairRow(base_name="bird", original=None, focused=Path("/in/Focused bird.png"))
    assert build_original_cell_text(focused_only) == "オリジナル画像なし"
    assert build_focused_cell_text(focused_only) == "Focused bird.png"
    assert build_focused_cell_text(pending) == ""


def test_build_history_texts() -> None:
    entry = HistoryEntry(
        timestamp=datetime(2026, 10, 19, 14, 5),
        results=(_ACCEPTABLE, _TOO_LARGE, _DECODE_FAILED),
    )
    assert build_history_title(entry) == "処理日時 2026/10/19 14:05"
    assert build_history_lines(entry) == [
        "dog.jpg - 適正サイズ",
        "cat.png - サイズ超過",
        "empty.png - 読み込み失敗",
    ]

    empty = HistoryEntry(timestamp=datetime(2026, 10, 19, 14, 6), results=())
    assert build_history_lines(empty) == ["（対象画像なし）"]


def test_build_run_status_text() -> None:
    assert build_run_status_text([]) == "処理対象のオリジナル画像がありません"
    assert (
        build_run_status_text([_ACCEPTABLE, _TOO_LARGE, _DECODE_FAILED, _WRITE_FAILED])
        == "完了: 4件 / 適正 1 / リサイズ 1 / 失敗 2"
    )


def test_build_failure_and_save_error_text() -> None:
    assert build_failure_detail(_DECODE_FAILED) == "画像ファイルとして認識できません"
    assert build_failure_detail(_WRITE_FAILED) == "リサイズ画像の保存に失敗しました\n権限設定をご確認ください。"
    assert build_save_error_text("保存失敗", None) == "保存失敗"
    assert build_save_error_text("保存失敗", "再試行") == "保存失敗\n\n再試行"


def test_build_drop_hint_text() -> None:
    assert build_drop_hint_text(drag_drop_enabled=True, reference_count=0) == "ここに画像をドラッグ&ドロップ"
    assert build_drop_hint_text(drag_drop_enabled=True, reference_count=3).endswith("読み込み済み: 3件")
    assert "利用できません" in build_drop_hint_text(drag_drop_enabled=False, reference_count=0)
