import math

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1, lon1, lat2, lon2):
    """Great-circle distance between two points in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def within_radius(rows, latitude, longitude, radius_km, lat_key='latitude', lon_key='longitude'):
    """Keep the rows whose coordinates lie within ``radius_km``.

    Each kept row gets a ``distance_km`` entry; rows without coordinates are
    skipped. Input order is preserved.
    """
    matches = []
    for row in rows:
        if row.get(lat_key) is None or row.get(lon_key) is None:
            continue
        distance = haversine_km(latitude, longitude, float(row[lat_key]), float(row[lon_key]))
        if distance <= radius_km:
            row['distance_km'] = round(distance, 2)
            matches.append(row)
    return matches
