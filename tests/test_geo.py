import pytest

from order.geo import haversine_km, within_radius


def test_one_degree_of_latitude():
    assert haversine_km(0, 0, 1, 0) == pytest.approx(111.19, abs=0.01)


def test_same_point_is_zero():
    assert haversine_km(-6.9175, 107.6191, -6.9175, 107.6191) == 0


def test_bandung_to_jakarta():
    assert haversine_km(-6.9175, 107.6191, -6.2088, 106.8456) == pytest.approx(116, abs=2)


def test_within_radius_filters_and_keeps_order():
    rows = [
        {'id': 1, 'latitude': -6.8850, 'longitude': 107.6135},
        {'id': 2, 'latitude': -6.2088, 'longitude': 106.8456},
        {'id': 3, 'latitude': None, 'longitude': 107.6},
        {'id': 4, 'latitude': -6.9175, 'longitude': 107.6191},
    ]
    matches = within_radius(rows, -6.9175, 107.6191, 10)
    assert [row['id'] for row in matches] == [1, 4]
    assert matches[0]['distance_km'] == pytest.approx(3.66, abs=0.05)
    assert matches[1]['distance_km'] == 0


def test_within_radius_custom_keys():
    rows = [{'restaurant_latitude': '-6.8850', 'restaurant_longitude': '107.6135'}]
    matches = within_radius(rows, -6.9175, 107.6191, 5, lat_key='restaurant_latitude', lon_key='restaurant_longitude')
    assert len(matches) == 1
