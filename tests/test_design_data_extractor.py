import base64
import json
import re
from datetime import datetime, timezone

import pytest

from figma_nodes import parse_selection
from design_types import ExportOptions, merge_options
from design_data_extractor import extract_design_data, iso_timestamp
from serializers import serialize
from screenshot_extractor import SCREENSHOT_EXPORT_SETTINGS


def test_iso_timestamp_format():
    moment = datetime(2024, 5, 1, 9, 30, 0, 123456, tzinfo=timezone.utc)

    assert iso_timestamp(moment) == "2024-05-01T09:30:00.123Z"
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", iso_timestamp())


@pytest.mark.asyncio
async def test_all_extractors_enabled(card_payload, host):
    nodes = parse_selection([card_payload])

    design_data = await extract_design_data(nodes, merge_options(), host)

    node = design_data.nodes[0].to_dict()
    assert list(node) == ["id", "name", "type", "screenshot", "hierarchy", "measurements", "styles", "structure"]
    assert node["screenshot"] == "data:image/png;base64," + base64.b64encode(host.image).decode("ascii")
    assert host.calls == [("1:3", SCREENSHOT_EXPORT_SETTINGS)]
    assert host.calls[0][1] == {"format": "PNG", "constraint": {"type": "SCALE", "value": 2}}


@pytest.mark.asyncio
async def test_text_node_scenario_json(text_payload):
    options = merge_options({
        "includeScreenshot": False,
        "includeHierarchy": False,
        "includeStructure": False,
        "includeStyles": True,
        "includeMeasurements": True,
        "outputFormat": "json",
    })

    design_data = await extract_design_data(parse_selection([text_payload]), options)
    output = serialize(design_data, options.output_format)

    parsed = json.loads(output)
    node = parsed["nodes"][0]
    assert set(node) == {"id", "name", "type", "measurements", "styles"}
    assert node["styles"]["typography"]["fontWeight"] == 700
    assert parsed == design_data.to_dict()


@pytest.mark.asyncio
async def test_output_order_matches_selection(card_payload, text_payload, host):
    selection = [text_payload, card_payload, dict(text_payload, id="2:2", name="Subheading")]

    for options in (merge_options(), merge_options({"includeStyles": False, "includeScreenshot": False})):
        design_data = await extract_design_data(parse_selection(selection), options, host)
        assert [node.id for node in design_data.nodes] == ["2:1", "1:3", "2:2"]


@pytest.mark.asyncio
async def test_screenshot_failure_degrades_to_empty_string(card_payload, text_payload, make_host):
    failing_host = make_host(fail_for={"2:1"})
    nodes = parse_selection([text_payload, card_payload])

    design_data = await extract_design_data(nodes, merge_options(), failing_host)

    assert design_data.nodes[0].screenshot == ""
    assert "screenshot" in design_data.nodes[0].to_dict()
    assert design_data.nodes[1].screenshot.startswith("data:image/png;base64,")


@pytest.mark.asyncio
async def test_empty_results_are_not_attached(host):
    nodes = parse_selection([{"id": "7:1", "name": "Dot", "type": "ELLIPSE", "x": 0, "y": 0, "width": 4, "height": 4}])
    options = ExportOptions(include_screenshot=False)

    design_data = await extract_design_data(nodes, options, host)

    node = design_data.nodes[0].to_dict()
    assert "hierarchy" not in node
    assert "styles" not in node
    assert node["structure"] == {"isAutoLayout": False}


@pytest.mark.asyncio
async def test_extractor_errors_abort_the_export():
    # A SOLID fill without a color cannot be converted.
    nodes = parse_selection([{
        "id": "8:1", "name": "Bad", "type": "RECTANGLE", "x": 0, "y": 0, "width": 1, "height": 1,
        "fills": [{"type": "SOLID"}],
    }])

    with pytest.raises(AttributeError):
        await extract_design_data(nodes, ExportOptions(include_screenshot=False))


@pytest.mark.asyncio
async def test_screenshots_need_host_services(text_payload):
    with pytest.raises(ValueError):
        await extract_design_data(parse_selection([text_payload]), merge_options())


def test_merge_options_caller_wins():
    options = merge_options({"includeScreenshot": False, "output_format": "markdown", "unknown": 1})

    assert options.include_screenshot is False
    assert options.output_format == "markdown"
    assert options.include_styles is True


def test_default_options():
    options = merge_options(None)

    assert options.to_dict() == {
        "includeScreenshot": True,
        "includeHierarchy": True,
        "includeMeasurements": True,
        "includeStyles": True,
        "includeStructure": True,
        "outputFormat": "claude",
    }
