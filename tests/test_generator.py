from __future__ import annotations

from datetime import datetime

from llmstxt.models import PageRecord, PageType
from llmstxt.services.generator import generate_llms_txt

GENERATED_AT = datetime(2024, 5, 1, 12, 30, 45)


def test_generate_full_document() -> None:
    pages = [
        PageRecord(
            snapshot_id=1,
            url="https://example.com/",
            title="Home",
            description="Front page",
            content_hash="h0",
        ),
        PageRecord(
            snapshot_id=1,
            url="https://example.com/app.js",
            content_hash="h1",
            page_type=PageType.STATIC_ASSET,
        ),
    ]

    text = generate_llms_txt(pages, "https://example.com", generated_at=GENERATED_AT)

    assert text == (
        "# llms.txt generated for https://example.com\n"
        "# Generated at 2024-05-01T12:30:45\n"
        "\n"
        "URL: https://example.com/\n"
        "TITLE: Home\n"
        "DESCRIPTION: Front page\n"
        "\n"
        "URL: https://example.com/app.js\n"
        "\n"
    )


def test_empty_title_is_not_omitted() -> None:
    page = PageRecord(url="https://example.com/", title="", content_hash="h")

    text = generate_llms_txt([page], "https://example.com", generated_at=GENERATED_AT)

    assert "TITLE: \n" in text
    assert "DESCRIPTION" not in text


def test_empty_page_list_has_header_only() -> None:
    text = generate_llms_txt([], "https://example.com")

    lines = text.splitlines()
    assert lines[0] == "# llms.txt generated for https://example.com"
    assert lines[1].startswith("# Generated at ")
    assert not any(line.startswith("URL:") for line in lines)


def test_none_pages_yield_empty_string() -> None:
    assert generate_llms_txt(None, "https://example.com") == ""
