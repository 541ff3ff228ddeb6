"""Tests for EasyEDA SVG path helpers."""

import pytest

from easyeda.svg_path import (
    arc_from_path, endpoint_to_center, parse_path, path_outline, path_vertices,
)


class TestParsePath:
    def test_commands(self):
        commands = parse_path("M 10,20 L 30,40 Z")
        assert [c.command for c in commands] == ["M", "L", "Z"]
        assert commands[1].params == [30, 40]

    def test_implicit_lineto_after_move(self):
        commands = parse_path("M 0 0 10 0 10 10")
        assert [c.command for c in commands] == ["M", "L", "L"]
        assert commands[2].params == [10, 10]

    def test_implicit_lineto_after_relative_move(self):
        commands = parse_path("m 5 5 10 0 0 10 -10 0")
        assert [c.command for c in commands] == ["m", "l", "l", "l"]

    def test_unsupported_command(self):
        with pytest.raises(ValueError):
            parse_path("M 0 0 C 1 1 2 2 3 3")

    def test_wrong_parameter_count(self):
        with pytest.raises(ValueError):
            parse_path("M 0 0 L 5")


class TestPathVertices:
    def test_absolute_and_relative(self):
        points, closed = path_vertices("M 0 0 h 10 v 5 L 0 5 Z")
        assert points == [(0, 0), (10, 0), (10, 5), (0, 5)]
        assert closed

    def test_implicit_pairs_are_absolute(self):
        points, closed = path_vertices("M 0 0 10 0 10 10 0 10 Z")
        assert points == [(0, 0), (10, 0), (10, 10), (0, 10)]
        assert closed

    def test_implicit_pairs_after_relative_move(self):
        points, _ = path_vertices("m 5 5 10 0 0 10 -10 0")
        assert points == [(5, 5), (15, 5), (15, 15), (5, 15)]

    def test_arc_contributes_endpoint(self):
        points, closed = path_vertices("M 0 0 A 5 5 0 0 1 10 0")
        assert points == [(0, 0), (10, 0)]
        assert not closed


class TestPathOutline:
    def test_segments_and_close(self):
        segments, arcs = path_outline("M 0 0 10 0 v 10 Z")
        assert segments == [(0, 0, 10, 0), (10, 0, 10, 10), (10, 10, 0, 0)]
        assert arcs == []

    def test_arc_is_kept(self):
        segments, arcs = path_outline("M 0 0 L 10 0 A 5 5 0 0 1 20 0")
        assert segments == [(0, 0, 10, 0)]
        (arc,) = arcs
        assert (arc.cx, arc.cy, arc.radius) == (pytest.approx(15), pytest.approx(0),
                                                pytest.approx(5))

    def test_relative_arc(self):
        _, (arc,) = path_outline("M 10 0 a 5 5 0 0 1 10 0")
        assert arc.cx == pytest.approx(15)


class TestEndpointToCenter:
    def test_half_circle(self):
        arc = endpoint_to_center(-1, 0, 1, 1, 0, False, True, 1, 0)
        assert arc.cx == pytest.approx(0)
        assert arc.cy == pytest.approx(0)
        assert arc.radius == pytest.approx(1)
        assert arc.start_angle == pytest.approx(180)
        assert arc.end_angle == pytest.approx(0)

    def test_sweep_flag_swaps_ends(self):
        arc = endpoint_to_center(-1, 0, 1, 1, 0, False, False, 1, 0)
        assert arc.start_angle == pytest.approx(0)
        assert arc.end_angle == pytest.approx(180)

    def test_quarter_circle_center(self):
        arc = endpoint_to_center(1, 0, 1, 1, 0, False, True, 0, 1)
        assert arc.cx == pytest.approx(0)
        assert arc.cy == pytest.approx(0)
        assert arc.start_angle == pytest.approx(0)
        assert arc.end_angle == pytest.approx(90)

    def test_radius_too_small_is_scaled(self):
        arc = endpoint_to_center(0, 0, 1, 1, 0, False, True, 4, 0)
        assert arc.radius == pytest.approx(2)
        assert (arc.cx, arc.cy) == (pytest.approx(2), pytest.approx(0))

    def test_coincident_points(self):
        with pytest.raises(ValueError):
            endpoint_to_center(1, 1, 1, 1, 0, False, True, 1, 1)


class TestArcFromPath:
    def test_easyeda_arc(self):
        arc = arc_from_path("M 3999 3004 A 1 1 0 0 1 4001 3004")
        assert (arc.cx, arc.cy) == (pytest.approx(4000), pytest.approx(3004))
        assert arc.radius == pytest.approx(1)

    def test_not_an_arc(self):
        with pytest.raises(ValueError):
            arc_from_path("M 0 0 L 1 1")
