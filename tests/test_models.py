from pasturepickup.domain.models import RankedVendor, State, Vendor


def test_vendor_normalizes_loose_record_fields():
    vendor = Vendor.model_validate(
        {
            "id": "rec1",
            "name": None,
            "state_code": " tx ",
            "latitude": "30.25",
            "longitude": "-97.75",
            "service_types": "Dead Horse Removal, ,Farm Cleanup Services",
            "service_radius": "abc",
            "status": "Active",
        }
    )
    assert vendor.name == ""
    assert vendor.state_code == "TX"
    assert vendor.service_types == ["Dead Horse Removal", "Farm Cleanup Services"]
    assert vendor.service_radius == 25
    assert vendor.has_coordinates
    assert vendor.is_active


def test_invalid_or_half_coordinates_become_none():
    out_of_range = Vendor(id="a", latitude=95, longitude=10)
    half = Vendor(id="b", latitude=30.0, longitude=None)
    garbage = Vendor.model_validate({"id": "c", "latitude": "n/a", "longitude": "-97"})
    for vendor in (out_of_range, half, garbage):
        assert vendor.latitude is None
        assert vendor.longitude is None
        assert vendor.point is None


def test_zero_is_a_valid_coordinate():
    vendor = Vendor(id="a", latitude=0, longitude=0)
    assert vendor.has_coordinates
    assert vendor.point.lat == 0.0


def test_non_positive_service_radius_defaults():
    assert Vendor(id="a", service_radius=0).service_radius == 25
    assert Vendor(id="a", service_radius=-3).service_radius == 25
    assert Vendor(id="a", service_radius=40).service_radius == 40


def test_ranked_vendor_copies_fields():
    vendor = Vendor(id="a", name="A", status="Active", latitude=1, longitude=2)
    ranked = RankedVendor.from_vendor(vendor, 3.5)
    assert ranked.id == "a"
    assert ranked.distance_miles == 3.5
    assert ranked.has_coordinates


def test_state_slug():
    assert State(name="North Carolina", code="NC").slug == "north-carolina"


def test_missing_radius_uses_radius_from_validation_context():
    configured = Vendor.model_validate(
        {"id": "v1", "service_radius": None}, context={"default_service_radius_miles": 40}
    )
    assert configured.service_radius == 40
    assert Vendor.model_validate({"id": "v2"}, context={"default_service_radius_miles": 40}).service_radius == 40
    assert Vendor.model_validate({"id": "v3", "service_radius": 60}, context={"default_service_radius_miles": 40}).service_radius == 60
    assert Vendor(id="v4").service_radius == 25
