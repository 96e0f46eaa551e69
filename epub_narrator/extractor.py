"""
EPUB fragment extractor.

Copies the XHTML content documents out of an EPUB archive into a flat
directory and reports them in reading (spine) order.
"""

import posixpath
import shutil
import zipfile
from pathlib import Path
from typing import Dict, Iterable, List, Union
from urllib.parse import unquote

from bs4 import BeautifulSoup

from epub_narrator.utils.logger import get_logger

logger = get_logger(__name__)

CONTAINER_PATH = "META-INF/container.xml"
DEFAULT_EXTENSIONS = (".xhtml", ".html")
DEFAULT_FRAGMENT_DIR = "xhtml"


def read_spine_order(archive: zipfile.ZipFile) -> List[str]:
    """Return archive member names of the spine items in reading order.

    Follows META-INF/container.xml to the OPF package document, maps spine
    itemrefs to manifest hrefs and resolves them relative to the OPF.

    Args:
        archive: Open EPUB archive.

    Returns:
        Member names in spine order, or an empty list if the package
        document cannot be located.
    """
    names = set(archive.namelist())
    if CONTAINER_PATH not in names:
        logger.debug(f"[EXTRACT] No {CONTAINER_PATH} in archive")
        return []

    container = BeautifulSoup(archive.read(CONTAINER_PATH), 'html.parser')
    rootfile = container.find('rootfile')
    if rootfile is None or not rootfile.get('full-path'):
        logger.debug("[EXTRACT] container.xml has no rootfile")
        return []

    opf_path = rootfile['full-path']
    if opf_path not in names:
        logger.debug(f"[EXTRACT] Package document {opf_path} missing from archive")
        return []

    package = BeautifulSoup(archive.read(opf_path), 'html.parser')
    manifest: Dict[str, str] = {
        item['id']: item['href']
        for item in package.find_all('item')
        if item.get('id') and item.get('href')
    }

    opf_dir = posixpath.dirname(opf_path)
    spine = []
    for itemref in package.find_all('itemref'):
        href = manifest.get(itemref.get('idref', ''))
        if not href:
            continue
        member = posixpath.normpath(posixpath.join(opf_dir, unquote(href.split('#', 1)[0])))
        if member in names and member not in spine:
            spine.append(member)

    return spine


def extract_fragments(
    epub_path: Union[str, Path],
    output_dir: Union[str, Path],
    allowed_extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    fragment_dir: str = DEFAULT_FRAGMENT_DIR
) -> List[Path]:
    """
    Extract markup fragments from an EPUB into <output_dir>/<fragment_dir>.

    Files are flattened to their base names; a later member with the same
    name overwrites an earlier one.

    Args:
        epub_path: Path to the .epub file
        output_dir: Working directory for extracted files
        allowed_extensions: Extensions of members to extract
        fragment_dir: Subdirectory name for the fragments

    Returns:
        Paths of written fragments: spine items first in reading order, then
        any other eligible members in archive order

    Raises:
        FileNotFoundError: If epub_path does not exist
        zipfile.BadZipFile: If the file is not a zip archive
    """
    wanted = tuple(ext.lower() for ext in allowed_extensions)
    target_dir = Path(output_dir) / fragment_dir
    target_dir.mkdir(parents=True, exist_ok=True)

    with zipfile.ZipFile(epub_path) as archive:
        eligible = [
            info for info in archive.infolist()
            if not info.is_dir() and posixpath.splitext(info.filename)[1].lower() in wanted
        ]

        spine = read_spine_order(archive)
        spine_rank = {name: i for i, name in enumerate(spine)}
        ordered = sorted(
            eligible,
            key=lambda info: (info.filename not in spine_rank, spine_rank.get(info.filename, 0))
        )

        written: Dict[str, Path] = {}
        for info in ordered:
            basename = posixpath.basename(info.filename)
            target = target_dir / basename
            if basename in written:
                logger.warning(f"[EXTRACT] {info.filename} overwrites earlier {basename}")
            with archive.open(info) as src, open(target, 'wb') as dst:
                shutil.copyfileobj(src, dst)
            written[basename] = target

    # dict keeps first-insertion order, so an overwritten name keeps its first position
    fragments = list(written.values())
    logger.info(f"[EXTRACT] Extracted {len(fragments)} fragments from {epub_path} "
                f"({len(spine)} in spine) to {target_dir}")
    return fragments
