"""
Dynamic Option Catalog Tests

Version: option_catalog_v1
"""

from netrules.catalog import (
    ReferenceKind,
    ReferenceRecord,
    ReferenceSets,
    build_dynamic_options,
    sort_records,
)


class TestReferenceRows:

    def test_from_row_maps_name_and_sort_columns(self):
        record = ReferenceRecord.from_row(ReferenceKind.TUNNEL, {
            "id": "tn1",
            "tunnel_name": "Frankfurt",
            "description": "wg0",
            "tunnel_type": "wireguard",
            "status": "up",
            "ping_ms": 18.5,
            "is_active": True,
        })
        payload = record.to_api()
        assert record.name == "Frankfurt"
        assert record.sort_value == 18.5
        assert payload["tunnelType"] == "wireguard"
        assert payload["status"] == "up"
        assert payload["isActive"] is True

    def test_missing_name_falls_back_to_id(self):
        record = ReferenceRecord.from_row(ReferenceKind.USER_GROUP, {"id": 7, "priority": None})
        assert record.id == "7"
        assert record.name == "7"
        assert record.sort_value is None


class TestDynamicOptions:

    def test_only_active_records_offered(self, reference_sets):
        options = build_dynamic_options(reference_sets)
        assert [g.id for g in options.user_groups] == ["g2", "g1"]

    def test_domain_sort_orders(self, reference_sets):
        options = build_dynamic_options(reference_sets)
        # traffic types and paths descending, tunnels ascending
        assert [t.id for t in options.traffic_types] == ["t2", "t1"]
        assert [p.id for p in options.network_paths] == ["p1", "p2"]
        assert [t.id for t in options.tunnels] == ["tn1", "tn2"]

    def test_missing_sort_value_goes_last(self):
        records = [
            ReferenceRecord(id="a", name="Zulu"),
            ReferenceRecord(id="b", name="Alpha", sort_value=5),
            ReferenceRecord(id="c", name="Bravo", sort_value=5),
        ]
        ordered = sort_records(ReferenceKind.TUNNEL, records)
        assert [r.id for r in ordered] == ["b", "c", "a"]

    def test_serializes_camel_case_keys(self, reference_sets):
        payload = build_dynamic_options(reference_sets).to_api()
        assert set(payload) == {"userGroups", "trafficTypes", "networkPaths", "tunnels"}

    def test_empty_sets(self):
        options = build_dynamic_options(ReferenceSets())
        assert options.user_groups == []
        assert options.tunnels == []


class TestNodeLabels:

    def test_labels_keyed_by_node_key(self, reference_sets):
        labels = reference_sets.node_labels()
        assert labels["ug_g1"] == "Staff"
        assert labels["tt_t2"] == "VoIP"
        assert labels["np_p2"] == "LTE"
        assert labels["t_tn1"] == "Frankfurt"
