"""
EPUB Narrator Package

Turns XHTML fragments from an EPUB into plain text with narration pauses
and splits it into length-bounded chunks for text-to-speech jobs.

Modules:
- extractor.py - Pull XHTML fragments out of the EPUB in reading order
- markup.py - Pause annotation and tag stripping
- chunker.py - Delimiter-aware chunk splitting
- pipeline.py - Per-fragment processing and JSON output
- jobs.py - Speech job creation (one YAML job per chunk)
- cli.py - Command line entry point

Usage:
    narrator run book.epub --max-chars 500
"""

__version__ = "1.0.0"
__author__ = "ViSuReNa LLC"
