"""Tests for the annotation data model."""

import pytest

from tracksheet.core.annotations import Annotation, AnnotationKind, decode_data_url, encode_data_url
from tracksheet.core.annotations.models import clamp_font_size, parse_hex_color
from tracksheet.core.errors import InvalidAnnotationError


def test_defaults():
    ann = Annotation(page_index=0, x_fraction=0.2, y_fraction=0.3)

    assert ann.text == "Edit me"
    assert ann.font_size == 12
    assert ann.font_color == "#000000"
    assert ann.kind == AnnotationKind.TEXT
    assert len(ann.id) == 32


def test_ids_are_unique():
    assert Annotation(0, 0.1, 0.1).id != Annotation(0, 0.1, 0.1).id


@pytest.mark.parametrize("given,expected", [(-0.5, 0.0), (1.7, 1.0), (0.25, 0.25), (float("nan"), 0.0)])
def test_fractions_are_clamped(given, expected):
    ann = Annotation(page_index=0, x_fraction=given, y_fraction=given)

    assert ann.x_fraction == expected
    assert ann.y_fraction == expected


def test_negative_page_index_rejected():
    with pytest.raises(InvalidAnnotationError):
        Annotation(page_index=-1, x_fraction=0.1, y_fraction=0.1)


@pytest.mark.parametrize("text", ["", "   ", "\n"])
def test_empty_text_rejected(text):
    with pytest.raises(InvalidAnnotationError):
        Annotation(page_index=0, x_fraction=0.1, y_fraction=0.1, text=text)


@pytest.mark.parametrize("size", [5, 97, 0, 12.5])
def test_font_size_out_of_range_rejected(size):
    with pytest.raises(InvalidAnnotationError):
        Annotation(page_index=0, x_fraction=0.1, y_fraction=0.1, font_size=size)


def test_unknown_font_family_rejected():
    with pytest.raises(InvalidAnnotationError):
        Annotation(page_index=0, x_fraction=0.1, y_fraction=0.1, font_family="Wingdings")


@pytest.mark.parametrize("color", ["red", "#12345", "#GGGGGG", "000000"])
def test_invalid_color_rejected(color):
    with pytest.raises(InvalidAnnotationError):
        Annotation(page_index=0, x_fraction=0.1, y_fraction=0.1, font_color=color)


def test_invalid_annotation_error_is_a_value_error():
    with pytest.raises(ValueError):
        Annotation(page_index=0, x_fraction=0.1, y_fraction=0.1, text="")


@pytest.mark.parametrize("family,base", [
    ("Arial", "Helvetica"),
    ("Georgia", "Times-Roman"),
    ("Courier New", "Courier"),
])
def test_font_family_maps_to_base_font(family, base):
    ann = Annotation(page_index=0, x_fraction=0.1, y_fraction=0.1, font_family=family)

    assert ann.base_font == base


def test_rgb():
    assert parse_hex_color("#FF8000") == (255, 128, 0)
    assert Annotation(0, 0.1, 0.1, font_color="#00ff7f").rgb == (0, 255, 127)


def test_clamp_font_size():
    assert clamp_font_size(2) == 6
    assert clamp_font_size(200) == 96
    assert clamp_font_size("18") == 18
    assert clamp_font_size("big") == 12


def test_image_annotation_needs_data_and_size():
    with pytest.raises(InvalidAnnotationError):
        Annotation(0, 0.1, 0.1, kind=AnnotationKind.IMAGE, width_fraction=0.2, height_fraction=0.2)
    with pytest.raises(InvalidAnnotationError):
        Annotation(0, 0.1, 0.1, kind=AnnotationKind.IMAGE,
                   image_data=encode_data_url(b"x", "image/png"))


def test_with_changes_keeps_id_and_validates():
    ann = Annotation(page_index=0, x_fraction=0.1, y_fraction=0.1)

    changed = ann.with_changes(text="Approved", font_size=20)

    assert changed.id == ann.id
    assert changed.text == "Approved"
    assert ann.text == "Edit me"
    with pytest.raises(InvalidAnnotationError):
        ann.with_changes(font_size=200)
    with pytest.raises(InvalidAnnotationError):
        ann.with_changes(id="other")


def test_dict_round_trip_for_both_kinds():
    text = Annotation(page_index=1, x_fraction=0.5, y_fraction=0.1, text="Draft",
                      font_family="Georgia", font_color="#336699", font_size=18)
    image = Annotation(page_index=0, x_fraction=0.2, y_fraction=0.3, kind=AnnotationKind.IMAGE,
                       image_data=encode_data_url(b"\x89PNG", "image/png"),
                       width_fraction=0.25, height_fraction=0.1)

    assert Annotation.from_dict(text.to_dict()) == text
    assert Annotation.from_dict(image.to_dict()) == image
    assert "text" not in image.to_dict()


def test_from_dict_without_id_generates_one():
    ann = Annotation.from_dict({"page_index": 0, "x_fraction": 0.1, "y_fraction": 0.2, "text": "Hi"})

    assert ann.id
    assert ann.text == "Hi"


def test_data_url_helpers():
    url = encode_data_url(b"hello", "image/png")

    assert url.startswith("data:image/png;base64,")
    assert decode_data_url(url) == b"hello"
    with pytest.raises(ValueError):
        decode_data_url("https://example.com/a.png")
    with pytest.raises(ValueError):
        decode_data_url("data:image/png;base64,@@@")
