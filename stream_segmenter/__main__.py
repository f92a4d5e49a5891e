#!/usr/bin/env python3
"""
Stream Segmenter - Package Entry Point
python -m stream_segmenter で実行
"""

from stream_segmenter.presentation.cli import main

if __name__ == "__main__":
    main()
