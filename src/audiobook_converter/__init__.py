"""Audiobook Converter -- convert .m4b audiobooks into .mp3 files, optionally one per chapter.

Core modules:
    config    -- Converter configuration via pydantic-settings (.env + env vars)
                 and loguru setup.
    cli       -- Click CLI entry point (audiobook-convert). Prints a single
                 message and exits normally on missing ffmpeg/source or on
                 conversion errors.
    converter -- AudiobookConverter: output path resolution, chapter spans,
                 sequential per-chapter ffmpeg runs, progress aggregation and
                 track number tagging.
    ffmpeg    -- Transcoder: ffmpeg subprocess with -progress parsing and
                 optional cut (-ss/-t).
    ffprobe   -- Duration and chapter markers via ffprobe JSON output.
    metadata  -- MediaMetadata: ffprobe-backed reads, ffmpeg -c copy track
                 number writes with atomic replace.
    models    -- Chapter markers, media info, cut options, conversion state
                 and result.
    progress  -- Single-line CLI progress bar.
    errors    -- Exception hierarchy.
"""

__version__ = "1.0.0"
