from collections import Counter

import pytest

from cityboard.domain.clustering import cluster_events, map_pins, unique_events
from cityboard.domain.geohash import encode


def make_row(event_id, lat, lng):
    return {"id": event_id, "lat": lat, "lng": lng}


def grid_rows(n=60):
    return [
        make_row(f"ev-{i}", 52.40 + (i % 10) * 0.013, 13.20 + (i // 10) * 0.021)
        for i in range(n)
    ]


@pytest.mark.parametrize("precision", range(1, 9))
def test_cluster_counts_add_up_to_event_count(precision):
    rows = grid_rows()
    clusters = cluster_events(rows, precision)
    assert sum(cluster.count for cluster in clusters) == len(rows)
    assert all(cluster.count >= 1 for cluster in clusters)
    assert len({cluster.geohash for cluster in clusters}) == len(clusters)


def test_centroid_is_mean_of_member_coordinates():
    rows = [make_row("a", 52.5210, 13.4010), make_row("b", 52.5230, 13.4090), make_row("c", 52.5290, 13.4020)]
    assert len({encode(r["lat"], r["lng"], 4) for r in rows}) == 1
    (cluster,) = cluster_events(rows, 4)
    assert cluster.count == 3
    assert cluster.lat == pytest.approx((52.5210 + 52.5230 + 52.5290) / 3, abs=1e-9)
    assert cluster.lng == pytest.approx((13.4010 + 13.4090 + 13.4020) / 3, abs=1e-9)


def test_single_event_cluster_sits_on_the_event():
    (cluster,) = cluster_events([make_row("solo", 52.52, 13.405)], 8)
    assert cluster.count == 1
    assert cluster.lat == pytest.approx(52.52, abs=1e-9)
    assert cluster.lng == pytest.approx(13.405, abs=1e-9)
    assert cluster.geohash == encode(52.52, 13.405, 8)


def test_two_close_events_share_a_coarse_cell():
    rows = [make_row("a", 52.5200, 13.4050), make_row("b", 52.5201, 13.4051)]
    (cluster,) = cluster_events(rows, 5)
    assert cluster.count == 2
    assert cluster.lat == pytest.approx(52.52005, abs=1e-9)
    assert cluster.lng == pytest.approx(13.40505, abs=1e-9)


def test_two_close_events_split_at_fine_precision():
    rows = [make_row("a", 52.5200, 13.4050), make_row("b", 52.5201, 13.4051)]
    clusters = cluster_events(rows, 8)
    assert len(clusters) == 2
    assert Counter(cluster.count for cluster in clusters) == Counter({1: 2})


def test_duplicate_rows_are_counted_once():
    rows = [make_row("dup", 52.52, 13.405)] * 3 + [make_row("other", 52.52, 13.405)]
    (cluster,) = cluster_events(rows, 6)
    assert cluster.count == 2


def test_empty_input_yields_no_clusters():
    assert cluster_events([], 5) == []
    assert map_pins([]) == []


def test_map_pins_deduplicates_by_id():
    rows = [make_row("evt_1", 40.41, -3.70), make_row("evt_1", 40.41, -3.70), make_row("evt_2", 40.42, -3.71)]
    pins = map_pins(rows)
    assert sorted(pin.id for pin in pins) == ["evt_1", "evt_2"]


def test_unique_events_keeps_first_occurrence_order():
    rows = [make_row("b", 1.0, 1.0), make_row("a", 2.0, 2.0), make_row("b", 3.0, 3.0)]
    assert [row["id"] for row in unique_events(rows)] == ["b", "a"]
    assert unique_events(rows)[0]["lat"] == 1.0
