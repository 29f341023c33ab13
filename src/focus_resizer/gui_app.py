"""Drag-and-drop pixel-area checker GUI.

画像をドロップして「チェック＆リサイズ」を押すと、上限面積を超える画像だけを
縦横比を保って縮小する。左のサイドバーに過去の実行結果を表示する。

Usage:
    python -m focus_resizer.gui_app

A convenience entry point `focus-resizer` is also provided if installed as a package.
"""
from __future__ import annotations

from pathlib import Path
from tkinter import filedialog, messagebox
from typing import Any, Optional, Sequence

import customtkinter
from loguru import logger

from focus_resizer.errors import SaveDestinationFailure
from focus_resizer.history import HistoryEntry
from focus_resizer.image_save_pipeline import suggest_download_name
from focus_resizer.resize_core import Failed, TooLarge
from focus_resizer.runtime_logging import create_run_log_artifacts, setup_logging
from focus_resizer.session import PairRow, SessionState
from focus_resizer.settings import settings_from_env
from focus_resizer.ui.input_sources import (
    SELECTABLE_INPUT_EXTENSIONS,
    filter_dropped_files,
    parse_drop_data,
    setup_drag_and_drop,
)
from focus_resizer.ui_text_presenter import (
    build_drop_hint_text,
    build_failure_detail,
    build_focused_cell_text,
    build_history_lines,
    build_history_title,
    build_original_cell_text,
    build_run_status_text,
    build_save_error_text,
)

try:
    from tkinterdnd2 import DND_FILES, TkinterDnD

    TKDND_AVAILABLE = True
except ImportError:
    DND_FILES = None
    TkinterDnD = None
    TKDND_AVAILABLE = False

SIDEBAR_WIDTH = 250
LIST_HEIGHT = 300
PENDING_POLL_MS = 50

UI_COLORS = {
    "primary": "#0078d4",
    "drop_zone": "#E3F2FD",
    "danger": "#d32f2f",
    "divider": "#9e9e9e",
}

_AppBases: tuple = (customtkinter.CTk, TkinterDnD.DnDWrapper) if TKDND_AVAILABLE else (customtkinter.CTk,)


class FocusResizeApp(*_AppBases):  # type: ignore[misc]
    def __init__(self, session: Optional[SessionState] = None) -> None:
        super().__init__()
        self.session = session or SessionState(settings_from_env())
        self._drag_drop_enabled = False
        if TKDND_AVAILABLE:
            try:
                TkinterDnD._require(self)
            except Exception as exc:
                logger.warning(f"Drag and drop initialization failed: {exc}")

        self.title("Focus Resize")
        self.geometry("1000x640")
        self.minsize(800, 480)

        self._build_sidebar()
        self._build_main_area()

        self._drag_drop_enabled = TKDND_AVAILABLE and setup_drag_and_drop(
            self,
            [self, self.drop_zone],
            tkdnd_available=TKDND_AVAILABLE,
            dnd_files=DND_FILES,
            on_drop=self._on_drop_files,
        )
        self._refresh_drop_zone()
        self.after(PENDING_POLL_MS, self._poll_pending_drops)

    # ------------------------------------------------------------------ layout
    def _build_sidebar(self) -> None:
        self.sidebar = customtkinter.CTkScrollableFrame(self, width=SIDEBAR_WIDTH, label_text="処理履歴")
        self.sidebar.pack(side="left", fill="y", padx=(8, 4), pady=8)

    def _build_main_area(self) -> None:
        main = customtkinter.CTkFrame(self)
        main.pack(side="left", fill="both", expand=True, padx=(4, 8), pady=8)

        self.drop_zone = customtkinter.CTkLabel(
            main,
            text="",
            height=140,
            corner_radius=10,
            fg_color=UI_COLORS["drop_zone"],
            text_color=UI_COLORS["primary"],
            font=customtkinter.CTkFont(size=20),
        )
        self.drop_zone.pack(fill="x", padx=16, pady=(16, 8))
        self.drop_zone.bind("<Button-1>", lambda _event: self._select_files())

        self.check_button = customtkinter.CTkButton(main, text="チェック＆リサイズ", command=self._check_and_resize)
        self.clear_button = customtkinter.CTkButton(main, text="クリア", command=self._clear_session)

        header = customtkinter.CTkFrame(main, fg_color="transparent")
        header.pack(fill="x", padx=16, pady=(8, 0))
        customtkinter.CTkLabel(header, text="Original", font=customtkinter.CTkFont(weight="bold")).pack(side="left")
        customtkinter.CTkLabel(header, text="Focused", font=customtkinter.CTkFont(weight="bold")).pack(side="right")

        self.pair_list = customtkinter.CTkScrollableFrame(main, height=LIST_HEIGHT)
        self.pair_list.pack(fill="both", expand=True, padx=16, pady=(4, 8))

        self.status_var = customtkinter.StringVar(value="準備完了")
        customtkinter.CTkLabel(main, textvariable=self.status_var, anchor="w").pack(fill="x", padx=16, pady=(0, 8))

    # ------------------------------------------------------------------ input
    def _on_drop_files(self, event: Any) -> Any:
        dropped = parse_drop_data(getattr(event, "data", ""), splitlist=self.tk.splitlist)
        self._accept_paths(dropped)
        return getattr(event, "action", None)

    def _select_files(self) -> None:
        patterns = " ".join(f"*{ext}" for ext in SELECTABLE_INPUT_EXTENSIONS)
        selected = filedialog.askopenfilenames(title="画像を選択", filetypes=[("画像", patterns)])
        if selected:
            self._accept_paths([Path(p) for p in selected])

    def _accept_paths(self, paths: Sequence[Path]) -> None:
        files, ignored_count = filter_dropped_files(paths)
        if not files:
            messagebox.showwarning("ドラッグ&ドロップ", "画像ファイルが見つかりませんでした。")
            return
        self.session.enqueue_dropped(files)
        if ignored_count:
            self.status_var.set(f"対象外 {ignored_count}件をスキップ")

    def _poll_pending_drops(self) -> None:
        try:
            if self.session.drain_pending():
                self._refresh_pairs()
                self._refresh_drop_zone()
        finally:
            self.after(PENDING_POLL_MS, self._poll_pending_drops)

    # ------------------------------------------------------------------ actions
    def _check_and_resize(self) -> None:
        entry = self.session.check_and_resize()
        self.status_var.set(build_run_status_text(entry.results))
        self._refresh_pairs()
        self._append_history(entry)

    def _clear_session(self) -> None:
        self.session.clear()
        self.status_var.set("クリアしました")
        self._refresh_pairs()
        self._refresh_drop_zone()

    def _prompt_save(self, row: PairRow) -> None:
        if row.original is None or not isinstance(row.result, TooLarge):
            return
        initial_dir = Path.home() / "Downloads"
        destination = filedialog.asksaveasfilename(
            title="リサイズ画像を保存",
            initialdir=str(initial_dir) if initial_dir.is_dir() else str(Path.home()),
            initialfile=suggest_download_name(row.result.resized_path),
            defaultextension=".png",
            filetypes=[("PNG", "*.png")],
        )
        if not destination:
            return
        try:
            saved = self.session.save_resized(row.original, Path(destination))
        except SaveDestinationFailure as exc:
            messagebox.showerror("保存エラー", build_save_error_text(str(exc), exc.guidance))
            return
        self.status_var.set(f"保存しました: {saved.output_path}")

    # ------------------------------------------------------------------ render
    def _refresh_drop_zone(self) -> None:
        self.drop_zone.configure(
            text=build_drop_hint_text(
                drag_drop_enabled=self._drag_drop_enabled,
                reference_count=len(self.session.pairing.references),
            )
        )
        if self.session.has_references:
            self.check_button.pack(after=self.drop_zone, pady=(0, 4))
            self.clear_button.pack(after=self.check_button, pady=(0, 8))
        else:
            self.check_button.pack_forget()
            self.clear_button.pack_forget()

    def _refresh_pairs(self) -> None:
        for child in self.pair_list.winfo_children():
            child.destroy()
        for row in self.session.merged_rows():
            self._build_pair_row(row)

    def _build_pair_row(self, row: PairRow) -> None:
        frame = customtkinter.CTkFrame(self.pair_list, fg_color="transparent")
        frame.pack(fill="x", pady=2)
        frame.grid_columnconfigure(0, weight=1)
        frame.grid_columnconfigure(3, weight=1)

        text_color = UI_COLORS["danger"] if isinstance(row.result, Failed) else None
        left = customtkinter.CTkLabel(
            frame,
            text=build_original_cell_text(row),
            anchor="w",
            justify="left",
            wraplength=320,
            **({"text_color": text_color} if text_color else {}),
        )
        left.grid(row=0, column=0, sticky="w")
        if isinstance(row.result, Failed):
            left.bind("<Button-1>", lambda _e, r=row.result: messagebox.showinfo("詳細", build_failure_detail(r)))

        if self.session.can_offer_download(row):
            customtkinter.CTkButton(
                frame,
                text="リサイズ画像を保存",
                width=140,
                command=lambda r=row: self._prompt_save(r),
            ).grid(row=0, column=1, padx=4)

        customtkinter.CTkFrame(frame, width=1, fg_color=UI_COLORS["divider"]).grid(
            row=0, column=2, sticky="ns", padx=8
        )
        customtkinter.CTkLabel(frame, text=build_focused_cell_text(row), anchor="w", justify="left").grid(
            row=0, column=3, sticky="w"
        )

    def _append_history(self, entry: HistoryEntry) -> None:
        block = customtkinter.CTkFrame(self.sidebar, fg_color="transparent")
        block.pack(fill="x", anchor="w", pady=(0, 8))
        customtkinter.CTkLabel(
            block, text=build_history_title(entry), anchor="w", font=customtkinter.CTkFont(weight="bold")
        ).pack(fill="x")
        for line in build_history_lines(entry):
            customtkinter.CTkLabel(block, text=line, anchor="w", justify="left", wraplength=SIDEBAR_WIDTH - 20).pack(
                fill="x"
            )


def main() -> None:
    artifacts = create_run_log_artifacts()
    setup_logging(log_file=artifacts.run_log_path)
    logger.info(f"Focus Resize 起動 (ログ: {artifacts.run_log_path})")
    FocusResizeApp().mainloop()


if __name__ == "__main__":
    main()
