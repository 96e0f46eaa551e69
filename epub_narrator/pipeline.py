"""
Fragment processing pipeline.

markup fragment -> narration text -> chunks, for every fragment of a book,
then saved as JSON for the speech job writer.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from epub_narrator.chunker import split_text
from epub_narrator.extractor import extract_fragments
from epub_narrator.jobs import create_speech_jobs
from epub_narrator.markup import MarkupConverter, xhtml_to_text
from epub_narrator.utils.file_utils import ensure_directories, list_markup_under, write_json
from epub_narrator.utils.logger import get_logger
from epub_narrator.utils.validation import validate_max_chars, validate_workers

logger = get_logger(__name__)


def convert_fragment(
    markup: str,
    max_chars: int,
    converter: MarkupConverter = xhtml_to_text
) -> Dict[str, Any]:
    """Convert one markup fragment into narration text and numbered chunks.

    Args:
        markup: Raw XHTML fragment.
        max_chars: Maximum characters per chunk.
        converter: Markup to plain text conversion.

    Returns:
        Dict with text, chunks (chunk_id from 1), totals and an empty flag.

    Examples:
        >>> result = convert_fragment("<p>こんにちは。</p>", 500)
        >>> result["chunks"][0]["text"]
        'こんにちは。'
    """
    text = converter(markup)
    chunks = [
        {"chunk_id": i, "text": chunk, "char_count": len(chunk)}
        for i, chunk in enumerate(split_text(text, max_chars), start=1)
    ]
    return {
        "text": text,
        "chunks": chunks,
        "total_chunks": len(chunks),
        "char_count": len(text),
        "empty": not text.strip(),
    }


def process_fragments(
    paths: Sequence[Union[str, Path]],
    max_chars: int,
    workers: int = 1,
    converter: MarkupConverter = xhtml_to_text
) -> List[Dict[str, Any]]:
    """
    Read and convert fragment files, preserving input order.

    Conversions are independent, so with workers > 1 they run on a thread
    pool.

    Args:
        paths: Fragment files in reading order
        max_chars: Maximum characters per chunk
        workers: Number of worker threads
        converter: Markup to plain text conversion

    Returns:
        One result dict per path with index (from 1) and source added
    """
    validate_max_chars(max_chars)
    validate_workers(workers)

    def _process(item):
        index, path = item
        markup = Path(path).read_text(encoding='utf-8')
        result = convert_fragment(markup, max_chars, converter)
        result["index"] = index
        result["source"] = Path(path).name
        if result["empty"]:
            logger.debug(f"[PIPELINE] Fragment {result['source']} has no narration text")
        else:
            logger.debug(f"[PIPELINE] Fragment {result['source']}: "
                         f"{result['char_count']} chars, {result['total_chunks']} chunks")
        return result

    items = list(enumerate(paths, start=1))
    if workers == 1 or len(items) <= 1:
        return [_process(item) for item in items]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(_process, items))


def save_fragments(
    book_id: str,
    results: List[Dict[str, Any]],
    output_dir: Union[str, Path],
    max_chars: int,
    source_file: str = ""
) -> Path:
    """Save metadata.json and one fragment_NNN.json per non-empty fragment.

    Returns:
        The book output directory.
    """
    book_dir = Path(output_dir) / book_id
    book_dir.mkdir(parents=True, exist_ok=True)

    # Fragment files from an earlier run must not leak into this one
    stale = list(book_dir.glob("fragment_*.json"))
    for path in stale:
        path.unlink()
    if stale:
        logger.info(f"[PIPELINE] Removed {len(stale)} fragment files from a previous run in {book_dir}")

    narrated = [r for r in results if not r["empty"]]

    metadata = {
        "book_id": book_id,
        "source_file": source_file,
        "total_fragments": len(narrated),
        "skipped_fragments": len(results) - len(narrated),
        "total_chunks": sum(r["total_chunks"] for r in narrated),
        "total_chars": sum(r["char_count"] for r in narrated),
        "chunk_settings": {"max_chars": max_chars},
        "fragments": [
            {
                "index": r["index"],
                "source": r["source"],
                "total_chunks": r["total_chunks"],
                "char_count": r["char_count"],
            }
            for r in narrated
        ],
    }
    write_json(book_dir / "metadata.json", metadata)

    for result in narrated:
        write_json(book_dir / f"fragment_{result['index']:03d}.json", {
            "book_id": book_id,
            "fragment": {
                "index": result["index"],
                "source": result["source"],
                "text": result["text"],
                "chunks": result["chunks"],
                "total_chunks": result["total_chunks"],
                "char_count": result["char_count"],
            },
        })

    logger.info(f"[PIPELINE] Saved {len(narrated)} fragment files to {book_dir}")
    return book_dir


def run_pipeline(
    source: Union[str, Path],
    cfg: Dict[str, Any],
    create_jobs: bool = True,
    max_chars: Optional[int] = None,
    workers: Optional[int] = None
) -> Dict[str, Any]:
    """
    Run extraction, conversion, saving and job creation for one book.

    Args:
        source: An .epub file, or a directory of already extracted fragments
        cfg: Configuration from load_config()
        create_jobs: Whether to write speech job files
        max_chars: Overrides narrator.max_chars
        workers: Overrides narrator.workers

    Returns:
        Summary dict with success, book_id, totals and output_dir

    Examples:
        >>> cfg = load_config()
        >>> summary = run_pipeline("books/novel.epub", cfg)
        >>> print(summary["total_chunks"])
    """
    source = Path(source)
    max_chars = validate_max_chars(cfg["narrator"]["max_chars"] if max_chars is None else max_chars)
    workers = validate_workers(cfg["narrator"]["workers"] if workers is None else workers)
    paths_cfg = cfg["paths"]
    extensions = cfg["extract"]["allowed_extensions"]
    book_id = source.stem if source.is_file() else source.name

    ensure_directories({"work_dir": paths_cfg["work_dir"], "output_dir": paths_cfg["output_dir"]})

    logger.info(f"[PIPELINE] Processing {source} (max_chars={max_chars}, workers={workers})")

    if source.is_dir():
        fragment_paths = [Path(p) for p in list_markup_under(str(source), extensions)]
    else:
        fragment_paths = extract_fragments(
            source,
            Path(paths_cfg["work_dir"]) / book_id,
            allowed_extensions=extensions,
            fragment_dir=cfg["extract"]["fragment_dir"],
        )

    results = process_fragments(fragment_paths, max_chars, workers)
    book_dir = save_fragments(book_id, results, paths_cfg["output_dir"], max_chars, str(source))

    jobs_created = 0
    if create_jobs:
        job_result = create_speech_jobs(
            book_dir,
            jobs_dir=paths_cfg["jobs_dir"],
            finished_audio_dir=paths_cfg["finished_audio_dir"],
            workflow_id=cfg["jobs"]["workflow_id"],
            priority=cfg["jobs"]["priority"],
            voice_sample=cfg["jobs"]["voice_sample"],
        )
        jobs_created = job_result["jobs_created"]

    summary = {
        "success": True,
        "book_id": book_id,
        "total_fragments": sum(1 for r in results if not r["empty"]),
        "total_chunks": sum(r["total_chunks"] for r in results if not r["empty"]),
        "jobs_created": jobs_created,
        "output_dir": str(book_dir),
    }
    logger.info(f"[PIPELINE] Done {book_id}: {summary['total_fragments']} fragments, "
                f"{summary['total_chunks']} chunks, {jobs_created} jobs")
    return summary
