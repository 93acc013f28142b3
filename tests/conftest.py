import pytest

from vision_insights.cache.blob import MemoryBlobStore
from vision_insights.types import ImageIdentity, NoteFile


class FakeClock:
    """Controllable millisecond clock for TTL tests."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def blob_store():
    return MemoryBlobStore()


@pytest.fixture
def image_identity():
    return ImageIdentity(
        path="attachments/chart.png",
        url="chart.png",
        filename="chart.png",
        mime_type="image/png",
    )


@pytest.fixture
def note_file():
    return NoteFile(path="projects/Roadmap.md")


@pytest.fixture
def sample_vault(tmp_path):
    """Write a small vault of notes and attachments and return its root."""
    (tmp_path / "projects").mkdir()
    (tmp_path / "attachments").mkdir()
    (tmp_path / "people").mkdir()
    (tmp_path / ".obsidian").mkdir()

    (tmp_path / "projects" / "Roadmap.md").write_text(
        "---\n"
        "title: Roadmap\n"
        "tags: [planning, '#q3']\n"
        "---\n"
        "# Roadmap\n"
        "Intro mentions #strategy and [[Alice|our lead]].\n"
        "## Metrics\n"
        "Revenue grew, see [[Budget]].\n"
        "![[chart.png]]\n"
        "After the chart, compare with [[Missing Note]].\n"
        "## Next steps\n"
        "Ship it.\n",
        encoding="utf-8",
    )
    (tmp_path / "projects" / "Budget.md").write_text(
        "# Budget 2024\nNumbers.\n", encoding="utf-8"
    )
    (tmp_path / "people" / "Alice.md").write_text("No heading here.\n", encoding="utf-8")
    (tmp_path / "attachments" / "chart.png").write_bytes(b"\x89PNG\r\n")
    (tmp_path / ".obsidian" / "workspace.md").write_text("# Hidden\n", encoding="utf-8")
    return tmp_path
