"""Tests for the filesystem vault adapter."""

import pytest

from vision_insights.context.extractor import build_context
from vision_insights.context.locator import locate_image_reference
from vision_insights.errors.exceptions import MetadataError, ResolutionError
from vision_insights.vault import Vault, extract_inline_tags, parse_frontmatter


class TestResolve:
    def test_same_folder(self, sample_vault):
        vault = Vault(sample_vault)
        assert vault.resolve("Budget", "projects/Roadmap.md").path == "projects/Budget.md"

    def test_by_name_anywhere(self, sample_vault):
        vault = Vault(sample_vault)
        assert vault.resolve("Alice", "projects/Roadmap.md").path == "people/Alice.md"

    def test_attachment_with_extension(self, sample_vault):
        vault = Vault(sample_vault)
        assert vault.resolve("chart.png", "projects/Roadmap.md").path == "attachments/chart.png"

    def test_vault_relative_path(self, sample_vault):
        vault = Vault(sample_vault)
        assert vault.resolve("people/Alice", "projects/Roadmap.md").path == "people/Alice.md"

    def test_case_insensitive(self, sample_vault):
        assert Vault(sample_vault).resolve("budget", "").path == "projects/Budget.md"

    def test_missing(self, sample_vault):
        assert Vault(sample_vault).resolve("Missing Note", "projects/Roadmap.md") is None

    def test_hidden_folders_ignored(self, sample_vault):
        assert Vault(sample_vault).resolve("workspace", "") is None

    def test_escape_rejected(self, sample_vault):
        with pytest.raises(ResolutionError):
            Vault(sample_vault).resolve("../secret", "projects/Roadmap.md")


class TestMetadata:
    def test_frontmatter(self, sample_vault):
        vault = Vault(sample_vault)
        fm = vault.get_frontmatter(vault.file_for("projects/Roadmap.md"))
        assert fm == {"title": "Roadmap", "tags": ["planning", "#q3"]}

    def test_inline_tags(self, sample_vault):
        vault = Vault(sample_vault)
        assert vault.get_tags(vault.file_for("projects/Roadmap.md")) == ["#strategy"]

    def test_first_heading(self, sample_vault):
        vault = Vault(sample_vault)
        assert vault.get_first_heading(vault.file_for("projects/Budget.md")) == "Budget 2024"
        assert vault.get_first_heading(vault.file_for("people/Alice.md")) is None

    def test_attachments_have_no_metadata(self, sample_vault):
        vault = Vault(sample_vault)
        image = vault.file_for("attachments/chart.png")
        assert vault.get_tags(image) == []
        assert vault.get_frontmatter(image) is None

    def test_file_for_absolute_path(self, sample_vault):
        vault = Vault(sample_vault)
        assert vault.file_for(sample_vault / "people" / "Alice.md").path == "people/Alice.md"


class TestParsing:
    def test_no_frontmatter(self):
        assert parse_frontmatter("# Title") is None

    def test_empty_frontmatter(self):
        assert parse_frontmatter("---\n\n---\nbody") == {}

    def test_invalid_yaml_raises(self):
        with pytest.raises(MetadataError):
            parse_frontmatter("---\nkey: [unclosed\n---\n", "bad.md")

    def test_non_mapping_raises(self):
        with pytest.raises(MetadataError):
            parse_frontmatter("---\n- a\n- b\n---\n")

    def test_inline_tags_rules(self):
        text = "# Heading\n#tag one #nested/deep #2024 word#no [[Note#Section]]\n```\n#code\n```\n"
        assert extract_inline_tags(text) == ["#tag", "#nested/deep"]


class TestVaultContext:
    def test_full_context(self, sample_vault):
        vault = Vault(sample_vault)
        note = vault.file_for("projects/Roadmap.md")
        text = vault.read_text(note)
        match = locate_image_reference(text, "attachments/chart.png", "chart.png")

        ctx = build_context(text, match, note=note, resolver=vault, metadata=vault)

        assert ctx.note_name == "Roadmap"
        assert ctx.section_path == ("Roadmap", "Metrics")
        assert ctx.section_text.startswith("Revenue grew")
        assert "Next steps" not in ctx.section_text
        assert [(l.link_text, l.path, l.excerpt) for l in ctx.related_links] == [
            ("our lead", "people/Alice.md", "Alice"),
            ("Budget", "projects/Budget.md", "Budget 2024"),
        ]
        assert ctx.tags == ("strategy", "planning", "q3")
        assert ctx.frontmatter["title"] == "Roadmap"
