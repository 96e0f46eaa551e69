"""
Shared fixtures: a small EPUB archive and a matching configuration.
"""

import zipfile
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml


CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

CONTENT_OPF = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="uid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:title>テスト</dc:title>
  </metadata>
  <manifest>
    <item id="c1" href="text/chapter1.xhtml" media-type="application/xhtml+xml"/>
    <item id="c2" href="text/chapter2.xhtml" media-type="application/xhtml+xml"/>
    <item id="cover" href="text/cover.xhtml" media-type="application/xhtml+xml"/>
    <item id="css" href="style/book.css" media-type="text/css"/>
  </manifest>
  <spine>
    <itemref idref="cover"/>
    <itemref idref="c1"/>
    <itemref idref="c2"/>
  </spine>
</package>
"""

CHAPTER1 = "<html><body><h1>第一章</h1><p>吾輩は猫である。名前はまだ無い。</p></body></html>"
CHAPTER2 = "<html><body><h2>第二章</h2><p>どこで生れたかとんと見当がつかぬ。</p></body></html>"
COVER = "<html><body><img src=\"cover.png\"/></body></html>"


@pytest.fixture
def epub_file(tmp_path: Path) -> Path:
    """EPUB whose archive order differs from its spine order."""
    path = tmp_path / "book.epub"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("mimetype", "application/epub+zip")
        zf.writestr("META-INF/container.xml", CONTAINER_XML)
        zf.writestr("OEBPS/content.opf", CONTENT_OPF)
        zf.writestr("OEBPS/text/chapter2.xhtml", CHAPTER2)
        zf.writestr("OEBPS/text/chapter1.xhtml", CHAPTER1)
        zf.writestr("OEBPS/text/cover.xhtml", COVER)
        zf.writestr("OEBPS/text/notes.html", "<p>注記</p>")
        zf.writestr("OEBPS/style/book.css", "body {}")
    return path


@pytest.fixture
def config_data(tmp_path: Path) -> Dict[str, Any]:
    return {
        "narrator": {"max_chars": 10, "workers": 2},
        "extract": {"allowed_extensions": [".xhtml", ".html"], "fragment_dir": "xhtml"},
        "paths": {
            "work_dir": str(tmp_path / "work"),
            "output_dir": str(tmp_path / "output"),
            "jobs_dir": str(tmp_path / "jobs" / "processing"),
            "finished_audio_dir": str(tmp_path / "jobs" / "finished"),
        },
        "jobs": {"workflow_id": "T2S_test", "priority": 3, "voice_sample": "voice.wav"},
        "logging": {"level": "INFO", "file": None},
    }


@pytest.fixture
def config_file(tmp_path: Path, config_data: Dict[str, Any]) -> Path:
    path = tmp_path / "narrator.yaml"
    path.write_text(yaml.dump(config_data, allow_unicode=True), encoding="utf-8")
    return path
