#!/usr/bin/env python3
"""
Stream Segmenter - CLI View
CLIのView層：パイプラインイベント購読とコンソール表示
"""

import sys

from colorama import Fore, Style  # type: ignore[import-untyped]

from stream_segmenter import __version__
from stream_segmenter.domain import (
    CoreError,
    PipelineEvent,
    Segment,
    SegmentationSession,
    SpeechBoundary,
)
from stream_segmenter.infrastructure import Pipeline


def format_ms(value: float) -> str:
    """ミリ秒を mm:ss.mmm 形式に整形"""
    total_ms = max(0, int(round(value)))
    minutes, remainder = divmod(total_ms, 60_000)
    seconds, millis = divmod(remainder, 1000)
    return f"{minutes:02d}:{seconds:02d}.{millis:03d}"


class CLIView:
    """
    CLI View層

    責務:
    - パイプラインイベントの購読
    - セグメント・エラー・サマリの整形表示
    """

    def __init__(self, verbose: bool = False) -> None:
        """
        Args:
            verbose: Trueの場合は speechStart / speechEnd も表示
        """
        self.verbose = verbose

    def attach(self, pipeline: Pipeline) -> None:
        """パイプラインのイベントを購読"""
        pipeline.events.on(PipelineEvent.SEGMENT, self._show_segment)
        pipeline.events.on(PipelineEvent.ERROR, self._show_error)
        if self.verbose:
            pipeline.events.on(PipelineEvent.SPEECH_START, self._show_speech_start)
            pipeline.events.on(PipelineEvent.SPEECH_END, self._show_speech_end)

    # ========== 表示 ==========

    def show_header(self, source_name: str) -> None:
        print(f"{Fore.CYAN}Stream Segmenter v{__version__}{Style.RESET_ALL}")
        print(f"{Fore.CYAN}Source: {source_name}{Style.RESET_ALL}\n")

    def _show_speech_start(self, event: SpeechBoundary) -> None:
        print(f"{Style.DIM}  ▶ speech start @ {format_ms(event.ts_ms)}{Style.RESET_ALL}")

    def _show_speech_end(self, event: SpeechBoundary) -> None:
        print(f"{Style.DIM}  ■ speech end   @ {format_ms(event.ts_ms)}{Style.RESET_ALL}")

    def _show_segment(self, segment: Segment) -> None:
        samples = 0 if segment.pcm is None else len(segment.pcm)
        print(
            f"{Fore.GREEN}[{format_ms(segment.start_ms)} → {format_ms(segment.end_ms)}]"
            f"{Style.RESET_ALL} {segment.duration_ms:8.1f} ms "
            f"{Style.DIM}({samples} samples, id={segment.id}){Style.RESET_ALL}"
        )

    def _show_error(self, error: CoreError) -> None:
        sys.stderr.write(f"{Fore.RED}[{error.code}] {error.message}{Style.RESET_ALL}\n")

    def show_summary(self, session: SegmentationSession) -> None:
        """処理結果のサマリを表示"""
        print(f"\n{Fore.CYAN}{'─' * 50}{Style.RESET_ALL}")
        print(f"Segments : {session.get_total_segments()}")
        print(f"Speech   : {format_ms(session.get_total_speech_ms())}")
        if session.get_total_errors():
            print(f"{Fore.YELLOW}Errors   : {session.get_total_errors()}{Style.RESET_ALL}")
        print(f"{Fore.CYAN}{'─' * 50}{Style.RESET_ALL}")
