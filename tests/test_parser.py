"""Tests for the EasyEDA payload parser."""

import json

import pytest

from conftest import make_payload
from easyeda import load_payload, parse_component, parse_footprint, parse_symbol
from easyeda.parser import ELLIPSE_SEGMENTS
from errors import ParseError
from models import Arc, Circle, Line, Model3DRef


class TestLoadPayload:
    def test_unwraps_envelope(self, payload):
        result = load_payload(payload)
        assert result["title"] == "NE555DR"

    def test_accepts_json_text(self, payload):
        assert load_payload(json.dumps(payload))["title"] == "NE555DR"
        assert load_payload(json.dumps(payload).encode())["title"] == "NE555DR"

    def test_accepts_bare_result(self, payload):
        assert load_payload(payload["result"])["title"] == "NE555DR"

    def test_invalid_json(self):
        with pytest.raises(ParseError):
            load_payload("{not json")

    def test_not_an_object(self):
        with pytest.raises(ParseError):
            load_payload("[1, 2, 3]")

    def test_failed_request(self):
        with pytest.raises(ParseError, match="request failed"):
            load_payload({"success": False, "code": 404, "result": None})


class TestParseSymbol:
    def test_pins(self, component):
        pins = component.symbol.pins
        assert [p.designator for p in pins] == ["1", "2"]
        gnd, trig = pins
        assert (gnd.x, gnd.y, gnd.name) == (380, 290, "GND")
        assert gnd.electrical == "4"
        assert gnd.rotation == 180
        assert gnd.length == 10
        assert trig.name == "TRIG"
        assert trig.length == 10

    def test_body_and_graphics(self, component):
        symbol = component.symbol
        assert len(symbol.rectangles) == 1
        rect = symbol.rectangles[0]
        assert (rect.x, rect.y, rect.width, rect.height) == (390, 280, 20, 40)
        assert rect.color == 0x880000
        assert not rect.filled
        assert symbol.lines == (Line(390, 320, 410, 320, width=1.0, color=0x880000),)
        assert [t.text for t in symbol.texts] == ["NE555"]
        assert symbol.texts[0].height == 7

    def test_metadata(self, component):
        assert component.identity == "C46749"
        assert component.name == "NE555DR"
        assert component.symbol.prefix == "U"
        assert component.symbol.origin == (400, 300)
        assert component.symbol.description == "NE555DR - Converted from EasyEDA"

    def test_explicit_description(self):
        component = parse_component(make_payload(description="Timer IC"))
        assert component.symbol.description == "Timer IC"

    def test_unsupported_primitive_is_skipped(self):
        component = parse_component(make_payload(symbol_shapes=["J~1~2~3"]))
        assert "Skipping unsupported symbol primitive 'J'" in component.warnings

    def test_circle(self, component):
        assert component.symbol.circles == (Circle(400, 300, 5, width=1.0, color=0x880000),)

    def test_filled_circle(self):
        component = parse_component(make_payload(symbol_shapes=["C~0~0~3~#000000~2~0~#FF0000~g~0"]))
        circle = component.symbol.circles[0]
        assert (circle.radius, circle.width, circle.filled) == (3, 2, True)

    def test_ellipse_is_drawn_as_outline(self):
        component = parse_component(make_payload(symbol_shapes=["E~0~0~10~5~#000000~1~0~none"]))
        lines = component.symbol.lines
        assert component.symbol.circles == ()
        assert len(lines) == ELLIPSE_SEGMENTS
        assert (lines[0].x1, lines[0].y1) == (10, 0)
        assert (lines[-1].x2, lines[-1].y2) == (10, 0)

    def test_svg_arc(self):
        shape = "A~M 410 300 A 10 10 0 0 1 400 310~~#880000~1~0~none~g~0"
        component = parse_component(make_payload(symbol_shapes=[shape]))
        arc = component.symbol.arcs[0]
        assert (arc.cx, arc.cy) == (pytest.approx(400), pytest.approx(300))
        assert arc.radius == pytest.approx(10)
        assert (arc.start_angle, arc.end_angle) == (pytest.approx(0), pytest.approx(90))
        assert arc.color == 0x880000

    def test_centre_form_arc(self):
        component = parse_component(make_payload(symbol_shapes=["A~0~0~5~0~90~g~0"]))
        assert component.symbol.arcs == (Arc(0, 0, 5, 0, 90, width=1.0),)

    def test_path_with_arc(self):
        shape = "PATH~2~3~M 0 0 L 10 0 A 5 5 0 0 1 20 0~g~0"
        component = parse_component(make_payload(symbol_shapes=[shape]))
        symbol = component.symbol
        assert symbol.lines == (Line(0, 0, 10, 0, width=2),)
        arc = symbol.arcs[0]
        assert (arc.cx, arc.cy, arc.radius) == (pytest.approx(15), pytest.approx(0),
                                                pytest.approx(5))
        assert arc.width == 2

    def test_malformed_shape_is_skipped(self):
        component = parse_component(make_payload(symbol_shapes=["R~bad~280~2~2~20~40"]))
        assert component.symbol.rectangles == ()
        assert any("malformed symbol R" in w for w in component.warnings)

    def test_duplicate_pin_number(self):
        pin = "P~show~0~1~380~290~180~gge2~0^^380~290^^M 380 290 h 10^^1~0~0~0~A^^1~0~0~0~1"
        component = parse_component(make_payload(symbol_shapes=[pin, pin]))
        assert len(component.symbol.pins) == 1
        assert any("duplicate number '1'" in w for w in component.warnings)

    def test_pin_without_path_has_no_length(self):
        component = parse_component(make_payload(symbol_shapes=["P~show~~7~400~310~90~g~0"]))
        pin = component.symbol.pins[0]
        assert pin.length is None
        assert pin.electrical is None
        assert pin.name == ""

    def test_short_text_form(self):
        component = parse_component(make_payload(symbol_shapes=["T~5~6~90~VCC~~~~10"]))
        text = component.symbol.texts[0]
        assert (text.x, text.y, text.rotation, text.text, text.height) == (5, 6, 90, "VCC", 10)

    def test_polygon_is_closed(self):
        component = parse_component(make_payload(symbol_shapes=["PG~0 0 10 0 10 10~#000000~1"]))
        lines = component.symbol.lines
        assert len(lines) == 3
        assert (lines[-1].x2, lines[-1].y2) == (0, 0)

    def test_path_shape(self):
        component = parse_component(make_payload(symbol_shapes=["PT~M 0 0 L 10 0 L 10 10~#000000~2"]))
        assert len(component.symbol.lines) == 2
        assert component.symbol.lines[0].width == 2

    def test_path_with_implicit_linetos(self):
        shape = "PT~M 0 0 10 0 10 10 0 10 Z~#000000~1"
        component = parse_component(make_payload(symbol_shapes=[shape]))
        ends = [(ln.x1, ln.y1, ln.x2, ln.y2) for ln in component.symbol.lines]
        assert ends == [(0, 0, 10, 0), (10, 0, 10, 10), (10, 10, 0, 10), (0, 10, 0, 0)]

    def test_data_str_as_json_text(self, payload):
        data = payload["result"]["dataStr"]
        payload["result"]["dataStr"] = json.dumps(data)
        symbol, _ = parse_symbol(payload["result"])
        assert len(symbol.pins) == 2

    def test_missing_title(self, payload):
        del payload["result"]["title"]
        with pytest.raises(ParseError):
            parse_component(payload)

    def test_missing_shape_list(self, payload):
        payload["result"]["dataStr"] = {"head": {}}
        with pytest.raises(ParseError):
            parse_component(payload)


class TestParseFootprint:
    def test_pads(self, component):
        footprint = component.footprint
        assert footprint.name == "SOIC-8_L4.9-W3.9-P1.27"
        assert footprint.origin == (4000, 3000)
        names = [p.name for p in footprint.pads]
        assert names == ["1", "2", "3", "4", ""]

        pad1 = footprint.pads[0]
        assert (pad1.x, pad1.y, pad1.width, pad1.height) == (3995, 2995, 1.5, 0.6)
        assert pad1.shape == "RECT"
        assert pad1.layer == "1"
        assert pad1.hole_diameter == 0

        assert footprint.pads[1].rotation == 90
        assert footprint.pads[2].hole_diameter == 1.0
        assert footprint.pads[2].layer == "11"

    def test_mounting_hole(self, component):
        hole = component.footprint.pads[-1]
        assert hole.hole_diameter == pytest.approx(0.8)
        assert not hole.plated
        assert hole.layer == "11"

    def test_graphics(self, component):
        footprint = component.footprint
        assert len(footprint.lines) == 1
        assert footprint.lines[0].layer == "3"
        assert len(footprint.arcs) == 2
        circle, arc = footprint.arcs
        assert (circle.start_angle, circle.end_angle) == (0, 360)
        assert isinstance(arc, Arc)
        assert (arc.cx, arc.cy) == (pytest.approx(4000), pytest.approx(3004))
        assert arc.start_angle == pytest.approx(180)
        assert arc.end_angle == pytest.approx(0)
        assert [t.text for t in footprint.texts] == ["NE555DR"]

    def test_rect_outline(self):
        component = parse_component(make_payload(footprint_shapes=["RECT~0~0~4~2~0.1~g~3~0"]))
        lines = component.footprint.lines
        assert len(lines) == 4
        assert all(ln.layer == "3" for ln in lines)

    def test_model_named_after_component(self, component):
        model = component.footprint.model
        assert isinstance(model, Model3DRef)
        assert model.filename == "NE555DR.step"
        assert model.title == "SOIC-8_L4.9-W3.9-H1.5"
        assert model.rotation == (0, 0, 90)
        assert model.z_offset == 0.5

    def test_unsupported_primitive_is_skipped(self, component):
        assert "Skipping unsupported footprint primitive 'VIA'" in component.warnings

    def test_duplicate_pad_name(self):
        pad = "PAD~RECT~4000~3000~1~1~1~~1~0~~0~g~0~~Y"
        component = parse_component(make_payload(footprint_shapes=[pad, pad]))
        assert len(component.footprint.pads) == 1
        assert any("duplicate name '1'" in w for w in component.warnings)

    def test_repeated_mounting_holes_are_kept(self):
        holes = ["HOLE~4000~3000~0.4~g1~0", "HOLE~4010~3000~0.4~g2~0"]
        component = parse_component(make_payload(footprint_shapes=holes))
        assert len(component.footprint.pads) == 2

    def test_no_package(self, payload):
        del payload["result"]["packageDetail"]
        footprint, warnings = parse_footprint(payload["result"])
        assert footprint is None
        assert warnings == []
        assert parse_component(payload).footprint is None


class TestIdentity:
    def test_explicit_id_wins(self, payload):
        assert parse_component(payload, "C999").identity == "C999"

    def test_supplier_part(self, payload):
        del payload["result"]["lcsc"]
        payload["result"]["dataStr"]["head"]["c_para"]["Supplier Part"] = "C123"
        assert parse_component(payload).identity == "C123"

    def test_falls_back_to_title(self, payload):
        del payload["result"]["lcsc"]
        assert parse_component(payload).identity == "NE555DR"
