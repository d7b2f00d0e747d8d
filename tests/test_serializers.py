import json

import pytest

from design_types import (
    Color,
    DesignData,
    FillStyle,
    MeasurementsData,
    NodeData,
    Spacing,
    StructureData,
    StylesData,
    TypographyStyle,
)
from serializers import format_as_json, format_as_markdown, format_as_tagged, serialize


@pytest.fixture
def design_data():
    return DesignData(
        timestamp="2024-05-01T14:05:09.000Z",
        nodes=[
            NodeData(
                id="1:2",
                name="Button",
                type="FRAME",
                screenshot="data:image/png;base64,AAAA",
                measurements=MeasurementsData(
                    x=10, y=20.0, width=120, height=40, rotation=0,
                    padding=Spacing(top=8, left=16),
                ),
                styles=StylesData(fills=[
                    FillStyle(type="SOLID", color=Color(r=1, g=0, b=0, a=1, hex="#ff0000")),
                    FillStyle(type="GRADIENT_LINEAR"),
                ]),
                structure=StructureData(layout_mode="HORIZONTAL", item_spacing=8, is_auto_layout=True),
            ),
            NodeData(
                id="2:1",
                name="Heading",
                type="TEXT",
                measurements=MeasurementsData(x=0, y=0, width=240, height=32, rotation=-12.5),
                styles=StylesData(typography=TypographyStyle(
                    font_family="Inter",
                    font_size=24,
                    font_weight=700,
                    color=Color(r=0, g=0, b=0, a=1, hex="#000000"),
                )),
                structure=StructureData(is_auto_layout=False),
            ),
        ],
    )


def test_tagged_markup(design_data):
    expected = "\n".join([
        "<design_specs>",
        '  <component name="Button" type="FRAME">',
        "    <screenshot>data:image/png;base64,AAAA</screenshot>",
        "    <measurements>",
        '      <position x="10" y="20" />',
        '      <size width="120" height="40" />',
        '      <padding top="8" left="16" />',
        "    </measurements>",
        "    <styles>",
        "      <fills>",
        '        <fill type="SOLID">',
        '          <color hex="#ff0000" r="1" g="0" b="0" a="1" />',
        "        </fill>",
        '        <fill type="GRADIENT_LINEAR">',
        "        </fill>",
        "      </fills>",
        "    </styles>",
        "    <structure>",
        '      <autoLayout mode="HORIZONTAL" spacing="8" />',
        "    </structure>",
        "  </component>",
        '  <component name="Heading" type="TEXT">',
        "    <measurements>",
        '      <position x="0" y="0" />',
        '      <size width="240" height="32" />',
        "      <rotation>-12.5</rotation>",
        "    </measurements>",
        "    <styles>",
        "      <typography>",
        '        <font family="Inter" size="24" weight="700" />',
        '        <color hex="#000000" />',
        "      </typography>",
        "    </styles>",
        "    <structure>",
        "    </structure>",
        "  </component>",
        "</design_specs>",
    ])

    assert format_as_tagged(design_data) == expected


def test_tagged_markup_does_not_escape_names():
    data = DesignData(timestamp="2024-05-01T00:00:00.000Z", nodes=[NodeData(id="1", name='Say "hi" <b>', type="TEXT")])

    assert '<component name="Say "hi" <b>" type="TEXT">' in format_as_tagged(data)


def test_markdown(design_data):
    expected = (
        "# Design Specifications\n\n"
        "Exported on: 5/1/2024, 2:05:09 PM\n\n"
        "## Button (FRAME)\n\n"
        "![Button](data:image/png;base64,AAAA)\n\n"
        "### Measurements\n\n"
        "- Position: X: 10, Y: 20\n"
        "- Size: Width: 120, Height: 40\n"
        "\n"
        "### Colors\n\n"
        "- #ff0000\n"
        "\n"
        "## Heading (TEXT)\n\n"
        "### Measurements\n\n"
        "- Position: X: 0, Y: 0\n"
        "- Size: Width: 240, Height: 32\n"
        "- Rotation: -12.5°\n"
        "\n"
    )

    assert format_as_markdown(design_data) == expected


def test_markdown_skips_typography_and_structure(design_data):
    markdown = format_as_markdown(design_data)

    assert "Inter" not in markdown
    assert "HORIZONTAL" not in markdown


def test_markdown_midnight_timestamp():
    data = DesignData(timestamp="2024-12-31T00:00:00.000Z", nodes=[])

    assert "Exported on: 12/31/2024, 12:00:00 AM" in format_as_markdown(data)


@pytest.mark.parametrize("value,expected", [
    (1e-07, "1e-7"),
    (1.5e-07, "1.5e-7"),
    (0.000001, "0.000001"),
    (0.00001, "0.00001"),
    (-0.25, "-0.25"),
    (1e16, "10000000000000000"),
    (1234.5, "1234.5"),
    (1e21, "1e+21"),
    (float("nan"), "NaN"),
])
def test_numbers_render_like_plugin_templates(value, expected):
    data = DesignData(
        timestamp="2024-05-01T00:00:00.000Z",
        nodes=[NodeData(id="1", name="Dot", type="ELLIPSE",
                        measurements=MeasurementsData(x=value, y=0, width=1, height=1))],
    )

    assert f"- Position: X: {expected}, Y: 0\n" in format_as_markdown(data)
    assert f'<position x="{expected}" y="0" />' in format_as_tagged(data)


def test_json_is_indented_and_omits_absent_fields(design_data):
    output = format_as_json(design_data)
    parsed = json.loads(output)

    assert output.startswith('{\n  "timestamp": "2024-05-01T14:05:09.000Z",\n  "nodes": [')
    assert "hierarchy" not in parsed["nodes"][0]
    assert parsed["nodes"][0]["measurements"]["rotation"] == 0
    assert parsed["nodes"][1]["structure"] == {"isAutoLayout": False}


@pytest.mark.parametrize("output_format", ["json", "markdown", "claude", "claude-tagged", "yaml"])
def test_serializing_twice_is_identical(design_data, output_format):
    assert serialize(design_data, output_format) == serialize(design_data, output_format)


def test_format_dispatch(design_data):
    assert serialize(design_data, "claude") == format_as_tagged(design_data)
    assert serialize(design_data, "claude-tagged") == format_as_tagged(design_data)
    assert serialize(design_data, "markdown") == format_as_markdown(design_data)
    assert serialize(design_data, "json") == format_as_json(design_data)


def test_unknown_format_falls_back_to_json(design_data):
    assert serialize(design_data, "yaml") == format_as_json(design_data)
