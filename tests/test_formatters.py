"""Tests for the output formatters."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from ogn_aprs.aprs.parser import parse_line
from ogn_aprs.formatters import (
    JsonFormatter,
    OgnFormatter,
    SBS1Formatter,
    get_formatter,
    message_to_dict,
)

FLARM_LINE = (
    "FLRDDE626>APRS,qAS,EGHL:/074548h5111.32N/00102.04W'086/007/A=000607 "
    "id0ADDE626 -019fpm +0.0rot 5.5dB 3e -4.3kHz"
)
ADSB_LINE = (
    "ICA4D21C2>OGADSB,qAS,HLST:/001140h4741.90N/01104.20E^124/460/A=034868 "
    "!W91! id254D21C2 +128fpm FL350.00 A3:AXY547M Sq2244"
)
STATUS_LINE = "FLRDDE626>APRS,qAS,EGHL:>Receiver Status Message"


def _fixed_clock() -> datetime:
    return datetime(2024, 5, 1, 12, 34, 56, 789000, tzinfo=timezone.utc)


def test_ogn_formatter_passes_sentence_through() -> None:
    assert OgnFormatter().format(parse_line(FLARM_LINE)) == FLARM_LINE
    assert OgnFormatter().format(parse_line("garbage")) == "garbage"


def test_sbs1_formatter_traffic_report() -> None:
    output = SBS1Formatter(clock=_fixed_clock).format(parse_line(FLARM_LINE))

    assert output == (
        "MSG,8,111,11111,DDE626,111111,2024/05/01,12:34:56.789,2024/05/01,12:34:56.789,"
        "DDE626,607,7,86,51.188667,-1.034000,-18,,,,,"
    )


def test_sbs1_formatter_prefers_flight_number() -> None:
    fields = SBS1Formatter(clock=_fixed_clock).format(parse_line(ADSB_LINE)).split(",")

    assert fields[4] == "4D21C2"
    assert fields[10] == "AXY547M"
    assert fields[11] == "34868"
    assert fields[12] == "460"
    assert fields[13] == "124"


def test_sbs1_formatter_skips_non_traffic() -> None:
    formatter = SBS1Formatter(clock=_fixed_clock)

    assert formatter.format(parse_line(STATUS_LINE)) == ""
    assert formatter.format(parse_line("# server comment")) == ""
    assert formatter.format(parse_line(FLARM_LINE.replace("5111.32N", "51xx.32N"))) == ""


def test_sbs1_formatter_pads_short_address() -> None:
    line = FLARM_LINE.replace("id0ADDE626", "")
    output = SBS1Formatter(clock=_fixed_clock).format(parse_line(line))

    assert output.split(",")[4] == "000000"


def test_json_formatter_emits_enum_names_and_nulls() -> None:
    record = json.loads(JsonFormatter().format(parse_line(STATUS_LINE)))

    assert record["type"] == "STATUS"
    assert record["latitude"] is None
    assert record["altitude"] is None
    assert record["sentence"] == STATUS_LINE


def test_json_formatter_unknown_records() -> None:
    message = parse_line("INVALID MESSAGE FORMAT")

    assert JsonFormatter().format(message) == ""
    record = json.loads(JsonFormatter(include_unknown=True).format(message))
    assert record["type"] == "UNKNOWN"


def test_message_to_dict_traffic_report() -> None:
    record = message_to_dict(parse_line(FLARM_LINE))

    assert record["aircraft_type"] == "TOW_PLANE"
    assert record["address_type"] == "FLARM"
    assert record["symbol"] == "GLIDER"
    assert record["latitude"] == pytest.approx(51.1886666667)
    assert record["stealth_mode"] is False


def test_get_formatter_by_name() -> None:
    assert isinstance(get_formatter("ogn"), OgnFormatter)
    assert isinstance(get_formatter(" SBS1 "), SBS1Formatter)
    assert isinstance(get_formatter("json"), JsonFormatter)


def test_get_formatter_rejects_unknown_name() -> None:
    with pytest.raises(ValueError) as excinfo:
        get_formatter("csv")

    assert "csv" in str(excinfo.value)
