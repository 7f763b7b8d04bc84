"""Tests for mapping pointer locations to page positions and back."""

import pytest

from tracksheet.core.page import PageGeometry, Position, map_pointer


def test_click_on_second_page_of_two():
    geometry = PageGeometry(left=0, top=0, width=800, height=1200, page_count=2)

    position = geometry.pointer_to_position(400, 900)

    assert geometry.page_height_px == 600
    assert position == Position(1, 0.5, 0.5)


def test_position_renders_back_at_click():
    geometry = PageGeometry(left=0, top=0, width=800, height=1200, page_count=2)

    position = geometry.pointer_to_position(400, 900)

    assert geometry.position_to_screen(position) == pytest.approx((400, 900))


@pytest.mark.parametrize("px,py", [(0, 0), (123.4, 56.7), (799.9, 599.9), (10, 600), (640.25, 1199)])
def test_round_trip_within_container(px, py):
    geometry = PageGeometry(left=35, top=120, width=800, height=1200, page_count=2)

    position = geometry.pointer_to_position(px + 35, py + 120)

    assert geometry.position_to_client(position) == pytest.approx((px + 35, py + 120), abs=1e-6)


def test_container_offset_is_subtracted():
    geometry = PageGeometry(left=100, top=50, width=800, height=1200, page_count=2)

    assert geometry.pointer_to_position(500, 950) == Position(1, 0.5, 0.5)


def test_clicks_outside_container_are_clamped():
    geometry = PageGeometry(left=0, top=0, width=800, height=1200, page_count=2)

    below = geometry.pointer_to_position(-10, 1300)
    above = geometry.pointer_to_position(900, -40)

    assert below == Position(1, 0.0, 1.0)
    assert above == Position(0, 1.0, 0.0)


def test_unknown_page_count_means_single_page():
    geometry = PageGeometry(left=0, top=0, width=600, height=800, page_count=None)

    position = geometry.pointer_to_position(300, 600)

    assert geometry.effective_page_count == 1
    assert position == Position(0, 0.5, 0.75)


def test_zero_area_surface_maps_to_nothing():
    assert PageGeometry(0, 0, 0, 1200, 2).pointer_to_position(10, 10) is None
    assert PageGeometry(0, 0, 800, 0, 2).pointer_to_position(10, 10) is None


def test_map_pointer_without_document():
    assert map_pointer(None, 10, 10) is None


def test_page_box():
    geometry = PageGeometry(left=0, top=0, width=800, height=1500, page_count=3)

    assert geometry.page_box(2) == (0.0, 1000.0, 800, 500.0)
