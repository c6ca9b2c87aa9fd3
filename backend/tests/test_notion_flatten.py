# backend/tests/test_notion_flatten.py

import logging

import pytest

from notion_blog.notion.flatten import (
    convert_property,
    flatten_post,
    flatten_properties,
    slugify,
)
from notion_blog.notion.schemas import PropertyKind, PropertyValue


def title(text):
    return {"type": "title", "title": [{"type": "text", "text": {"content": text}}]}


def rich_text(text):
    return {"type": "rich_text", "rich_text": [{"type": "text", "text": {"content": text}}]}


def select(name):
    return {"type": "select", "select": {"name": name} if name is not None else None}


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Hello & World! Déjà Vu", "hello-and-world-deja-vu"),
        ("My Post", "my-post"),
        ("  Leading and trailing  ", "leading-and-trailing"),
        ("a -- b", "a-b"),
        ("snake_case stays", "snake_case-stays"),
        ("", ""),
        (None, ""),
    ],
)
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_flatten_post_title_and_status():
    raw = {
        "id": "page-1",
        "created_time": "2024-01-01T00:00:00.000Z",
        "url": "https://www.notion.so/page-1",
        "properties": {
            "Title": title("My Post"),
            "Status": select("Published"),
        },
    }

    post = flatten_post(raw)

    assert post.id == "page-1"
    assert post.created == "2024-01-01T00:00:00.000Z"
    assert post.url == "https://www.notion.so/page-1"
    assert post.slug == "my-post"
    assert post.properties == {"Title": "My Post", "Status": "Published"}
    assert post.block == ""


def test_empty_values_are_not_included():
    props = {
        "Title": {"type": "title", "title": []},
        "Summary": {"type": "rich_text", "rich_text": []},
        "Status": select(None),
        "Cover": {"type": "files", "files": []},
    }

    assert flatten_properties(props) == {}


def test_unhandled_kinds_are_excluded():
    props = {
        "Views": {"type": "number", "number": 3},
        "Tags": {"type": "multi_select", "multi_select": [{"name": "python"}]},
        "Published": {"type": "date", "date": {"start": "2024-01-01"}},
        "Title": title("Kept"),
    }

    assert flatten_properties(props) == {"Title": "Kept"}


def test_files_property_uses_first_url():
    props = {
        "Hosted": {
            "type": "files",
            "files": [
                {"name": "a.png", "file": {"url": "https://files.example/a.png"}},
                {"name": "b.png", "file": {"url": "https://files.example/b.png"}},
            ],
        },
        "External": {
            "type": "files",
            "files": [{"name": "c.png", "external": {"url": "https://cdn.example/c.png"}}],
        },
    }

    assert flatten_properties(props) == {
        "Hosted": "https://files.example/a.png",
        "External": "https://cdn.example/c.png",
    }


def test_text_run_without_content_falls_back_to_plain_text_or_empty():
    props = {
        "Summary": {"type": "rich_text", "rich_text": [{"type": "mention", "plain_text": "@someone"}]},
        "Note": {"type": "rich_text", "rich_text": [{"type": "equation"}]},
        "Legacy": {"type": "text", "text": [{"text": {"content": "old"}}]},
    }

    assert flatten_properties(props) == {"Summary": "@someone", "Note": "", "Legacy": "old"}


def test_malformed_property_is_omitted_and_logged(caplog):
    props = {
        "Title": title("Survives"),
        "Broken": "not-an-object",
    }

    with caplog.at_level(logging.WARNING, logger="notion_blog.notion.flatten"):
        flattened = flatten_properties(props)

    assert flattened == {"Title": "Survives"}
    assert "Error mapping property Broken" in caplog.text


def test_convert_property_reports_error_instead_of_raising():
    result = convert_property(None)

    assert result.skipped
    assert isinstance(result.error, TypeError)


def test_properties_that_are_not_a_mapping_flatten_to_empty():
    assert flatten_properties(["Title"]) == {}
    assert flatten_properties(None) == {}


def test_post_without_title_has_empty_slug():
    post = flatten_post({"id": "page-2", "properties": {"Status": select("Published")}})

    assert post.slug == ""
    assert post.created is None
    assert post.properties == {"Status": "Published"}


def test_flatten_post_rejects_non_objects():
    with pytest.raises(TypeError):
        flatten_post("page-1")


def test_unknown_property_type_parses_as_other():
    prop = PropertyValue.from_raw({"type": "formula", "formula": {"string": "x"}})

    assert prop.kind == PropertyKind.OTHER
    assert prop.type_name == "formula"
    assert not prop.has_value()


def test_to_context_spreads_properties_and_puts_block_last():
    post = flatten_post(
        {
            "id": "page-1",
            "created_time": "2024-01-01T00:00:00.000Z",
            "url": "https://www.notion.so/page-1",
            "properties": {"Title": title("My Post")},
        }
    ).model_copy(update={"block": "# Intro"})

    context = post.to_context()

    assert list(context) == ["id", "created", "url", "slug", "Title", "block"]
    assert context["block"] == "# Intro"
