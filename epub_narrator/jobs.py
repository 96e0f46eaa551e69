"""
Create speech synthesis job configurations from saved fragment chunks.
Each chunk becomes a separate YAML job file, named so that sorting the
file names gives reading order.
"""

import json
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Union

import yaml

from epub_narrator.utils.logger import get_logger

logger = get_logger(__name__)


def create_chunk_job(
    book_id: str,
    fragment_index: int,
    chunk: Dict,
    jobs_dir: str,
    finished_audio_dir: str,
    workflow_id: str,
    priority: int,
    voice_sample: str,
    source: str = ""
) -> str:
    """
    Create a single YAML job configuration for one chunk.

    Args:
        book_id: Book identifier (usually the EPUB file stem)
        fragment_index: Fragment number in reading order
        chunk: Chunk dictionary with chunk_id, text and char_count
        jobs_dir: Directory for the YAML job files
        finished_audio_dir: Directory where synthesized audio should land
        workflow_id: Synthesis workflow identifier
        priority: Job priority
        voice_sample: Voice reference audio, may be empty
        source: Fragment file name

    Returns:
        Path to created YAML file
    """
    tag = f"f{fragment_index:03d}_chunk{chunk['chunk_id']:03d}"
    filename = f"SPEECH_{book_id}_{tag}.yaml"

    job_config = {
        "job_type": "SPEECH",
        "workflow_id": workflow_id,
        "priority": priority,
        "inputs": {
            "text": chunk["text"],
            "voice_sample": voice_sample,
            "filename_prefix": f"speech/{book_id}/f{fragment_index:03d}/chunk{chunk['chunk_id']:03d}/audio"
        },
        "outputs": {
            "file_path": f"{finished_audio_dir}/{book_id}_{tag}.wav"
        },
        "metadata": {
            "book_id": book_id,
            "fragment_index": fragment_index,
            "source": source,
            "chunk_id": chunk["chunk_id"],
            "char_count": chunk["char_count"],
            "creator": "EPUB Narrator",
            "created_at": datetime.now().isoformat()
        }
    }

    filepath = os.path.join(jobs_dir, filename)
    with open(filepath, 'w', encoding='utf-8') as f:
        yaml.dump(job_config, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    return filepath


def remove_book_jobs(book_id: str, jobs_dir: str) -> int:
    """Delete existing speech job files of one book.

    Only names written by create_chunk_job for exactly this book_id match,
    so a book named "novel" leaves "novel_2" jobs alone.

    Returns:
        Number of files removed
    """
    jobs_path = Path(jobs_dir)
    if not jobs_path.is_dir():
        return 0

    pattern = re.compile(rf"SPEECH_{re.escape(book_id)}_f\d{{3,}}_chunk\d{{3,}}\.yaml")
    removed = 0
    for path in jobs_path.iterdir():
        if path.is_file() and pattern.fullmatch(path.name):
            path.unlink()
            removed += 1
    return removed


def create_speech_jobs(
    book_dir: Union[str, Path],
    jobs_dir: str = "jobs/processing/speech",
    finished_audio_dir: str = "jobs/finished/speech",
    workflow_id: str = "T2S_default",
    priority: int = 5,
    voice_sample: str = ""
) -> Dict:
    """
    Create speech jobs for every chunk of a saved book.

    Args:
        book_dir: Directory holding fragment_NNN.json files
        jobs_dir: Directory to save YAML job files
        finished_audio_dir: Directory where finished audio files will be saved
        workflow_id: Synthesis workflow identifier
        priority: Job priority
        voice_sample: Voice reference audio path

    Returns:
        Dict with success, jobs_created, job_files and per-fragment errors

    Examples:
        >>> result = create_speech_jobs("output/novel")
        >>> print(result["jobs_created"])
    """
    book_path = Path(book_dir)
    if not book_path.is_dir():
        error_msg = f"Book folder '{book_dir}' not found"
        logger.error(f"[JOBS] {error_msg}")
        return {'success': False, 'error': error_msg, 'jobs_created': 0, 'job_files': [], 'errors': []}

    os.makedirs(jobs_dir, exist_ok=True)
    book_id = book_path.name

    removed = remove_book_jobs(book_id, jobs_dir)
    if removed:
        logger.info(f"[JOBS] Removed {removed} speech jobs from a previous run of {book_id}")

    job_files: List[str] = []
    errors = []
    for fragment_file in sorted(book_path.glob("fragment_*.json")):
        try:
            with open(fragment_file, 'r', encoding='utf-8') as f:
                fragment = json.load(f)["fragment"]

            for chunk in fragment["chunks"]:
                job_files.append(create_chunk_job(
                    book_id=book_id,
                    fragment_index=fragment["index"],
                    chunk=chunk,
                    jobs_dir=jobs_dir,
                    finished_audio_dir=finished_audio_dir,
                    workflow_id=workflow_id,
                    priority=priority,
                    voice_sample=voice_sample,
                    source=fragment.get("source", "")
                ))
        except (json.JSONDecodeError, KeyError) as e:
            logger.error(f"[JOBS] Skipping malformed {fragment_file.name}: {e}")
            errors.append({'file': fragment_file.name, 'error': str(e)})

    logger.info(f"[JOBS] Created {len(job_files)} speech jobs for {book_id} in {jobs_dir}")
    return {
        'success': not errors,
        'jobs_created': len(job_files),
        'job_files': job_files,
        'errors': errors,
    }
