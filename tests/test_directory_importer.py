"""
Tests for the diary directory importer.
"""

import pytest

from daybook.importers import DiaryDirectoryImporter


@pytest.fixture
def diary_dir(tmp_path):
    """Create a diary directory with nested and non-diary files."""
    content = tmp_path / "diary"
    (content / "2023").mkdir(parents=True)

    (content / "2024-05-22.md").write_text(
        "---\ntitle: A day\ntags: [life]\n---\n## 08:00\nMorning\n",
        encoding="utf-8"
    )
    (content / "2023" / "12-31.mdx").write_text("## 23:59\nLast minute\n", encoding="utf-8")
    (content / "notes.txt").write_text("## 10:00\nnot a diary file\n", encoding="utf-8")

    return content


def test_reads_markdown_files(diary_dir):
    """Test every markdown file is loaded, ordered by identifier."""
    entries = DiaryDirectoryImporter(str(diary_dir)).get_all_entries()

    assert [e.entry_id for e in entries] == ["2023/12-31.mdx", "2024-05-22.md"]
    assert entries[1].date == "2024-05-22"
    assert entries[1].path == str(diary_dir / "2024-05-22.md")


def test_front_matter_is_stripped(diary_dir):
    """Test the body no longer contains the YAML header."""
    entries = DiaryDirectoryImporter(str(diary_dir)).get_all_entries()

    body = entries[1].body
    assert body.startswith("## 08:00")
    assert "title:" not in body


def test_missing_directory(tmp_path):
    """Test a missing directory yields no entries."""
    importer = DiaryDirectoryImporter(str(tmp_path / "nowhere"))

    assert importer.get_all_entries() == []
