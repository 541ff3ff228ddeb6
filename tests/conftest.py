import sys
import os
import json
import pytest

# Add src/python to the path so tests can import modules directly
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src', 'python'))

_MODEL_NODE = {
    "gId": "g1_outline",
    "nodeName": "g",
    "nodeType": 1,
    "layerid": "19",
    "attrs": {
        "c_width": "4.9",
        "c_height": "3.9",
        "c_rotation": "0,0,90",
        "z": "0.5",
        "c_origin": "4000,3000",
        "uuid": "0f1a2b3c4d5e4f60a1b2c3d4e5f60718",
        "c_etype": "outline3D",
        "title": "SOIC-8_L4.9-W3.9-H1.5",
        "layerid": "19",
    },
    "childNodes": [],
}

SYMBOL_SHAPES = [
    "R~390~280~2~2~20~40~#880000~1~0~none~gge1~0~",
    "P~show~4~1~380~290~180~gge2~0^^380~290^^M 380 290 h 10~#880000"
    "^^1~393~294~0~GND~start~~~#0000FF^^1~388~289~0~1~end~~~#0000FF"
    "^^0~390~290^^0~M 390 293 L 393 290 L 390 287",
    "P~show~1~2~420~300~0~gge3~0^^420~300^^M 420 300 h -10~#880000"
    "^^1~407~304~0~TRIG~end~~~#0000FF^^1~412~299~0~2~start~~~#0000FF"
    "^^0~410~300^^0~M 410 303 L 407 300 L 410 297",
    "PL~390 320 410 320~#880000~1~0~none~gge4~0",
    "T~L~400~275~0~#0000FF~Arial~7pt~~~~comment~NE555~1~start~gge5~0",
    "E~400~300~5~5~#880000~1~0~none~gge6~0",
    "LIB~400~300~package`SOIC-8`~~~gge7~0",
]

FOOTPRINT_SHAPES = [
    "PAD~RECT~3995~2995~1.5~0.6~1~GND~1~0~3994.25 2994.7 3995.75 2994.7~0~gge10~0~~Y",
    "PAD~OVAL~4005~2995~1.5~0.6~1~TRIG~2~0~~90~gge11~0~~Y",
    "PAD~ELLIPSE~4000~3002~1.8~1.8~11~~3~0.5~~0~gge12~0~~Y",
    "PAD~POLYGON~4000~2990~1~1~1~~4~0~4000 2990~0~gge13~0~~Y",
    "TRACK~0.254~3~~3990 2990 4010 2990~gge14~0",
    "CIRCLE~3992~2992~0.2~0.2~3~gge15~0",
    "ARC~0.254~3~~M 3999 3004 A 1 1 0 0 1 4001 3004~~gge16~0",
    "HOLE~4000~3008~0.4~gge17~0",
    "VIA~4000~3010~0.6~~0.3~gge18~0",
    "TEXT~N~4000~2988~0.1~0~0~3~~1~NE555DR~M 0 0~~gge19~0",
    "SVGNODE~" + json.dumps(_MODEL_NODE),
]


def make_payload(symbol_shapes=None, footprint_shapes=None, **result_overrides):
    """Build a catalog response in the shape the EasyEDA API returns."""
    result = {
        "title": "NE555DR",
        "lcsc": {"number": "C46749", "url": "https://lcsc.com/product-detail/C46749.html"},
        "dataStr": {
            "head": {"x": 400, "y": 300, "c_para": {"pre": "U?", "name": "NE555DR"}},
            "shape": list(SYMBOL_SHAPES if symbol_shapes is None else symbol_shapes),
        },
        "packageDetail": {
            "title": "SOIC-8_L4.9-W3.9-P1.27-LS6.0-BL",
            "dataStr": {
                "head": {"x": 4000, "y": 3000, "c_para": {"package": "SOIC-8_L4.9-W3.9-P1.27"}},
                "shape": list(FOOTPRINT_SHAPES if footprint_shapes is None else footprint_shapes),
            },
        },
    }
    result.update(result_overrides)
    return {"success": True, "code": 0, "result": result}


@pytest.fixture
def payload():
    return make_payload()


@pytest.fixture
def component(payload):
    from easyeda import parse_component
    return parse_component(payload)


@pytest.fixture
def model_file(tmp_path):
    """A stand-in STEP file for 3D model passthrough."""
    path = tmp_path / "source_model.step"
    path.write_bytes(b"ISO-10303-21;\nHEADER;\nENDSEC;\nEND-ISO-10303-21;\n")
    return str(path)
