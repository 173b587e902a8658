import pytest

from terrain.bbox import (
    BoundingBox,
    FormatError,
    OutOfRangeError,
    bbox_within,
    ensure_bbox_within,
    parse_bbox,
    validate_bbox,
)

ALLOWED = BoundingBox(8.00830949937517, 54.4354651516217, 15.5979112056959, 57.7690657013977)


def test_parse_bbox_reads_tokens_in_lon_lat_order():
    bbox = parse_bbox("10.0,54.0,15.0,57.0")
    assert bbox == BoundingBox(min_lon=10.0, min_lat=54.0, max_lon=15.0, max_lat=57.0)


def test_parse_bbox_tolerates_whitespace_and_negative_values():
    bbox = parse_bbox(" -1.5 , 2 ,3e0,  4.25 ")
    assert bbox.as_tuple() == (-1.5, 2.0, 3.0, 4.25)


@pytest.mark.parametrize(
    "text",
    [
        "",
        "10.0,54.0,15.0",
        "10.0,54.0,15.0,57.0,1.0",
        "10.0,abc,15.0,57.0",
        "10.0,,15.0,57.0",
        "10.0;54.0;15.0;57.0",
        "nan,54.0,15.0,57.0",
        "10.0,54.0,inf,57.0",
    ],
)
def test_parse_bbox_rejects_malformed_text(text):
    with pytest.raises(FormatError):
        parse_bbox(text)


def test_parse_bbox_rejects_non_string():
    with pytest.raises(FormatError):
        parse_bbox(None)  # type: ignore[arg-type]


def test_format_error_is_value_error():
    assert issubclass(FormatError, ValueError)
    assert issubclass(OutOfRangeError, ValueError)


def test_allowed_box_contains_itself():
    assert bbox_within(ALLOWED, ALLOWED)


def test_box_touching_edges_is_accepted():
    touching = BoundingBox(ALLOWED.min_lon, 55.0, ALLOWED.max_lon, ALLOWED.max_lat)
    assert bbox_within(touching, ALLOWED)


@pytest.mark.parametrize(
    "candidate",
    [
        BoundingBox(8.0, 55.0, 10.0, 56.0),  # west of min_lon
        BoundingBox(9.0, 54.0, 10.0, 56.0),  # south of min_lat
        BoundingBox(9.0, 55.0, 15.6, 56.0),  # east of max_lon
        BoundingBox(9.0, 55.0, 10.0, 57.8),  # north of max_lat
    ],
)
def test_box_crossing_any_edge_is_rejected(candidate):
    assert not bbox_within(candidate, ALLOWED)


def test_max_lon_epsilon_past_allowed_is_rejected():
    candidate = BoundingBox(10.0, 55.0, ALLOWED.max_lon + 1e-9, 56.0)
    assert not bbox_within(candidate, ALLOWED)


def test_validate_bbox_returns_containment_result():
    assert validate_bbox("10.0,55.0,15.0,57.0", ALLOWED) is True
    # The default example request starts south of the allowed extent.
    assert validate_bbox("10.0,54.0,15.0,57.0", ALLOWED) is False


def test_validate_bbox_propagates_format_error():
    with pytest.raises(FormatError):
        validate_bbox("10.0,55.0", ALLOWED)


def test_ensure_bbox_within_names_rejected_region():
    candidate = BoundingBox(10.0, 54.0, 15.0, 57.0)
    with pytest.raises(OutOfRangeError) as excinfo:
        ensure_bbox_within(candidate, ALLOWED)
    assert excinfo.value.requested == candidate
    assert excinfo.value.allowed == ALLOWED
    assert "10.0,54.0,15.0,57.0" in str(excinfo.value)


def test_ensure_bbox_within_returns_candidate():
    candidate = BoundingBox(10.0, 55.0, 11.0, 56.0)
    assert ensure_bbox_within(candidate, ALLOWED) is candidate


def test_to_text_round_trips_through_parse():
    assert parse_bbox(ALLOWED.to_text()) == ALLOWED
