#!/usr/bin/env python3
"""
Stream Segmenter - CLI Controller
CLIアプリケーションのコントローラー層：設定・ソース・App/Viewの配線
"""

from pathlib import Path
from typing import Any

from colorama import Fore, Style  # type: ignore[import-untyped]

from stream_segmenter.domain import Settings
from stream_segmenter.infrastructure.audio import FileFrameSource
from stream_segmenter.infrastructure.config import load_settings
from stream_segmenter.presentation.app import StreamSegmenterApp

from .view import CLIView


def apply_overrides(settings: Settings, overrides: dict[str, dict[str, Any]]) -> Settings:
    """
    CLI引数による設定上書きを適用（Noneの値は無視）

    Args:
        settings: ベース設定
        overrides: {セクション名: {キー: 値}}

    Returns:
        Settings: 検証済みの新しい設定
    """
    updates: dict[str, Any] = {}
    for section, values in overrides.items():
        changes = {k: v for k, v in values.items() if v is not None}
        if not changes:
            continue
        current = getattr(settings, section)
        updates[section] = type(current)(**{**current.model_dump(), **changes})
    return settings.model_copy(update=updates)


class CLIController:
    """
    CLIコントローラー

    責務:
    - 設定の読み込みと上書き
    - FrameSourceの生成
    - App/View初期化と配線、実行
    """

    def __init__(
        self,
        file_path: Path,
        overrides: dict[str, dict[str, Any]] | None = None,
        output_dir: Path | None = None,
        json_path: Path | None = None,
        mono: bool = False,
        verbose: bool = False,
    ) -> None:
        self.file_path = file_path
        self.output_dir = output_dir
        self.json_path = json_path
        self.mono = mono
        self.settings = apply_overrides(load_settings(), overrides or {})
        self.view = CLIView(verbose=verbose)

    def run(self) -> int:
        """
        アプリケーションを実行

        Returns:
            int: 終了コード
        """
        if not self.file_path.exists():
            print(f"{Fore.RED}File not found: {self.file_path}{Style.RESET_ALL}")
            return 1

        source = FileFrameSource(self.file_path, mono=self.mono)
        app = StreamSegmenterApp(self.settings, output_dir=self.output_dir)
        self.view.attach(app.pipeline)

        self.view.show_header(str(self.file_path))
        session = app.run(source)
        self.view.show_summary(session)

        if self.json_path is not None:
            saved = app.save_session(self.json_path)
            print(f"{Fore.GREEN}Saved: {saved}{Style.RESET_ALL}")
        return 0
