def make_gpx(*segments, tracks=None) -> str:
    """Build a GPX document; each segment is a list of (lat, lon) string pairs."""
    if tracks is None:
        tracks = [segments]
    body = []
    for segs in tracks:
        body.append("<trk><name>test</name>")
        for seg in segs:
            body.append("<trkseg>")
            for lat, lon in seg:
                body.append(f'<trkpt lat="{lat}" lon="{lon}"><ele>100.0</ele></trkpt>')
            body.append("</trkseg>")
        body.append("</trk>")
    return (
        '<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">'
        + "".join(body)
        + "</gpx>"
    )


SAMPLE_POINTS = [("1.0", "2.0"), ("3.5", "-4.25"), ("0", "0")]
