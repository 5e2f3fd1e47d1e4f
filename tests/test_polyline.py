import pytest

from hamqadam.domain.models import Coordinate
from hamqadam.errors import DecodeError
from hamqadam.geometry.polyline import decode, encode

# Reference fixture from the encoded polyline algorithm documentation.
FIXTURE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"


def _pairs(coords):
    return [(c.lat, c.lng) for c in coords]


def test_decode_reference_fixture():
    path = decode(FIXTURE)

    assert _pairs(path) == [
        pytest.approx((38.5, -120.2), abs=1e-9),
        pytest.approx((40.7, -120.95), abs=1e-9),
        pytest.approx((43.252, -126.453), abs=1e-9),
    ]


def test_decode_first_two_points_of_fixture():
    # "_p~iF~ps|U" + "_ulLnnqC" is the fixture truncated after its second point.
    path = decode("_p~iF~ps|U_ulLnnqC")

    assert _pairs(path) == [
        pytest.approx((38.5, -120.2), abs=1e-9),
        pytest.approx((40.7, -120.95), abs=1e-9),
    ]


def test_decode_empty_string_is_empty_path():
    assert decode("") == []


def test_decode_returns_latitude_first_coordinates():
    (point,) = decode(encode([(35.6892, 51.389)]))
    assert isinstance(point, Coordinate)
    assert point.lat == pytest.approx(35.6892, abs=1e-5)
    assert point.lng == pytest.approx(51.389, abs=1e-5)


def test_encode_reference_fixture():
    assert encode([(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]) == FIXTURE


def test_round_trip_within_precision():
    original = [
        Coordinate(lat=35.6892, lng=51.389),
        Coordinate(lat=35.70012, lng=51.40007),
        Coordinate(lat=35.69999, lng=51.38001),
        Coordinate(lat=-33.86785, lng=151.20732),
        Coordinate(lat=0.0, lng=0.0),
        Coordinate(lat=89.99999, lng=-179.99999),
    ]

    decoded = decode(encode(original))

    assert len(decoded) == len(original)
    for got, want in zip(decoded, original):
        assert got.lat == pytest.approx(want.lat, abs=1e-5)
        assert got.lng == pytest.approx(want.lng, abs=1e-5)


def test_decode_supports_precision_6():
    encoded = encode([(35.689201, 51.389001)], precision=6)
    (point,) = decode(encoded, precision=6)
    assert point.lat == pytest.approx(35.689201, abs=1e-6)
    assert point.lng == pytest.approx(51.389001, abs=1e-6)


def test_decode_is_restartable():
    assert decode(FIXTURE) == decode(FIXTURE)


def test_truncated_group_raises_decode_error():
    # Drop the final character: the last longitude ends with its continuation bit set.
    with pytest.raises(DecodeError) as excinfo:
        decode(FIXTURE[:-1])
    assert "ends inside a value" in str(excinfo.value)


def test_latitude_without_longitude_raises_decode_error():
    with pytest.raises(DecodeError, match="latitude without a longitude"):
        decode("_p~iF")


def test_character_outside_alphabet_raises_decode_error():
    with pytest.raises(DecodeError) as excinfo:
        decode("_p~iF ps|U")
    assert excinfo.value.position == 5


def test_out_of_range_point_raises_decode_error():
    # A single latitude of 100 degrees cannot be a Coordinate.
    with pytest.raises(DecodeError, match="out of range"):
        decode(encode([(100.0, 0.0)]))


def test_decode_error_is_a_value_error():
    with pytest.raises(ValueError):
        decode("?")
