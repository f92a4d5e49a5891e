#!/usr/bin/env python3
"""
Stream Segmenter - JSON Exporter
インフラ層：セッションデータのJSON永続化
"""

import json
from datetime import datetime
from pathlib import Path

from stream_segmenter.domain import SegmentationSession


class SessionJsonExporter:
    """
    SegmentationSessionをJSON形式で永続化

    責務:
    - セグメントのメタデータ（PCMを除く）のシリアライズ
    - ファイルシステムへの保存
    """

    @staticmethod
    def save_to_file(
        session: SegmentationSession, output_path: Path | None = None
    ) -> Path:
        """
        セッションのセグメント一覧をJSONファイルに保存

        Args:
            session: 保存するセッション
            output_path: 出力先パス（Noneの場合は自動生成）

        Returns:
            Path: 保存されたファイルのパス
        """
        if output_path is None:
            # デフォルトファイル名: segments_YYYYMMDD_HHMMSS.json
            timestamp = session.session_start.strftime("%Y%m%d_%H%M%S")
            output_path = Path(f"segments_{timestamp}.json")

        segments_dict = [
            {
                "id": seg.id,
                "start_ms": round(seg.start_ms, 2),
                "end_ms": round(seg.end_ms, 2),
                "duration_ms": round(seg.duration_ms, 2),
                "sample_rate": seg.sample_rate,
                "channels": seg.channels,
                "samples": 0 if seg.pcm is None else int(len(seg.pcm)),
            }
            for seg in session.segments
        ]

        errors_dict = [
            {
                "code": err.code,
                "message": err.message,
                "cause": None if err.cause is None else repr(err.cause),
            }
            for err in session.errors
        ]

        output_data = {
            "session_start": session.session_start.isoformat(),
            "session_end": datetime.now().isoformat(),
            "total_segments": session.get_total_segments(),
            "total_errors": session.get_total_errors(),
            "total_speech_ms": round(session.get_total_speech_ms(), 2),
            "segments": segments_dict,
            "errors": errors_dict,
        }

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(output_data, f, ensure_ascii=False, indent=2)

        return output_path
