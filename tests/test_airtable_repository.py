import httpx
import pytest

import pasturepickup.storage.airtable as airtable
from pasturepickup.config.settings import Settings
from pasturepickup.core.errors import NotFoundError, RepositoryError, SubmissionStateError
from pasturepickup.domain.models import Vendor
from pasturepickup.storage.airtable import AirtableVendorRepository, build_vendor_formula


def _settings(**airtable_overrides) -> Settings:
    cfg = {"api_key": "key123", "base_id": "appBase"}
    cfg.update(airtable_overrides)
    return Settings.model_validate({"storage": {"backend": "airtable", "airtable": cfg}})


def _record(record_id: str, **fields):
    base = {"Name": record_id, "Status": "Active", "StateCode": "TX"}
    base.update(fields)
    return {"id": record_id, "createdTime": "2026-01-01T00:00:00.000Z", "fields": base}


def _http_404(url: str) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", url)
    response = httpx.Response(404, request=request)
    return httpx.HTTPStatusError("404", request=request, response=response)


def test_build_vendor_formula():
    assert build_vendor_formula() is None
    assert build_vendor_formula(status="Active") == 'AND({Status} = "Active")'
    assert build_vendor_formula(status="Active", service_types=["Dead Horse Removal", "Farm"]) == (
        'AND({Status} = "Active", OR(FIND("Dead Horse Removal", {ServicesType}) > 0, '
        'FIND("Farm", {ServicesType}) > 0))'
    )


def test_fetch_follows_offset_pages(monkeypatch):
    calls = []

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):
        calls.append((url, dict(params), headers))
        if "offset" not in dict(params):
            return {"records": [_record("rec1", ServicesType="Dead Horse Removal,Farm Cleanup Services")], "offset": "itr2"}
        return {"records": [_record("rec2", Latitude=30.1, Longitude=-97.2, ServiceRadius="")]}

    monkeypatch.setattr(airtable, "get_json", fake_get_json)

    vendors = AirtableVendorRepository(_settings()).fetch(status="Active")

    assert [v.id for v in vendors] == ["rec1", "rec2"]
    assert vendors[0].service_types == ["Dead Horse Removal", "Farm Cleanup Services"]
    assert vendors[1].service_radius == 25
    assert vendors[1].point is not None

    assert len(calls) == 2
    url, params, headers = calls[0]
    assert url == "https://api.airtable.com/v0/appBase/Vendors"
    assert headers == {"Authorization": "Bearer key123"}
    assert params["filterByFormula"] == 'AND({Status} = "Active")'
    assert params["sort[0][field]"] == "Name"
    assert calls[1][1]["offset"] == "itr2"


def test_fetch_skips_malformed_records(monkeypatch):
    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):
        return {"records": [_record("good"), _record("bad", Status="Deleted")]}

    monkeypatch.setattr(airtable, "get_json", fake_get_json)
    assert [v.id for v in AirtableVendorRepository(_settings()).fetch()] == ["good"]


def test_unexpected_shape_raises(monkeypatch):
    monkeypatch.setattr(airtable, "get_json", lambda *a, **k: {"error": "nope"})
    with pytest.raises(RepositoryError):
        AirtableVendorRepository(_settings()).fetch()


def test_missing_credentials_raise():
    with pytest.raises(RepositoryError, match="AIRTABLE_API_KEY"):
        AirtableVendorRepository(_settings(api_key=None)).fetch()
    with pytest.raises(RepositoryError, match="AIRTABLE_BASE_ID"):
        AirtableVendorRepository(_settings(base_id=None)).fetch()


def test_upstream_errors_propagate(monkeypatch):
    def fake_get_json(url, **kwargs):
        request = httpx.Request("GET", url)
        raise httpx.HTTPStatusError("500", request=request, response=httpx.Response(500, request=request))

    monkeypatch.setattr(airtable, "get_json", fake_get_json)
    with pytest.raises(httpx.HTTPError):
        AirtableVendorRepository(_settings()).fetch()


def test_fetch_by_id_404_is_none(monkeypatch):
    def fake_get_json(url, **kwargs):
        raise _http_404(url)

    monkeypatch.setattr(airtable, "get_json", fake_get_json)
    assert AirtableVendorRepository(_settings()).fetch_by_id("recMissing") is None


def test_create_submission_posts_fields_to_submissions_table(monkeypatch):
    posted = {}

    def fake_post_json(url, *, payload, headers=None, timeout_seconds=15):
        posted["url"] = url
        posted["payload"] = payload
        return {"id": "recNewSub"}

    monkeypatch.setattr(airtable, "post_json", fake_post_json)

    from pasturepickup.domain.models import Submission

    submission = Submission(
        business_name="Lone Star",
        contact_name="Dana",
        phone="555",
        email="d@example.com",
        address="Austin, TX",
        latitude=30.0,
        longitude=-97.0,
        services=["Dead Horse Removal", "Farm Cleanup Services"],
        submitter_ip="203.0.113.9",
    )
    assert AirtableVendorRepository(_settings()).create_submission(submission) == "recNewSub"

    assert posted["url"] == "https://api.airtable.com/v0/appBase/Vendor%20Submissions"
    fields = posted["payload"]["fields"]
    assert fields["BusinessName"] == "Lone Star"
    assert fields["Services"] == "Dead Horse Removal,Farm Cleanup Services"
    assert fields["SubmissionStatus"] == "Pending"
    assert fields["SubmitterIP"] == "203.0.113.9"


def test_create_vendor_returns_id(monkeypatch):
    monkeypatch.setattr(airtable, "post_json", lambda url, **k: {"id": "recVendor"})
    repo = AirtableVendorRepository(_settings())
    assert repo.create_vendor(Vendor(id="", name="V", status="Active")) == "recVendor"

    monkeypatch.setattr(airtable, "post_json", lambda url, **k: {})
    with pytest.raises(RepositoryError):
        repo.create_vendor(Vendor(id="", name="V", status="Active"))


def test_list_pending_queries_pending_newest_first(monkeypatch):
    seen = {}

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):
        seen.update(dict(params))
        seen["url"] = url
        return {
            "records": [
                {
                    "id": "recS1",
                    "fields": {
                        "BusinessName": "B",
                        "ContactName": "C",
                        "Phone": "P",
                        "Email": "E",
                        "Address": "A",
                        "Services": "Dead Horse Removal",
                        "SubmittedAt": "2026-02-01T12:00:00Z",
                    },
                }
            ]
        }

    monkeypatch.setattr(airtable, "get_json", fake_get_json)
    pending = AirtableVendorRepository(_settings()).list_pending()

    assert seen["filterByFormula"] == '{SubmissionStatus} = "Pending"'
    assert seen["sort[0][field]"] == "SubmittedAt"
    assert seen["sort[0][direction]"] == "desc"
    assert [s.id for s in pending] == ["recS1"]
    assert pending[0].services == ["Dead Horse Removal"]
    assert pending[0].submission_status == "Pending"


def test_status_update_404_is_not_found(monkeypatch):
    def fake_patch_json(url, *, payload, headers=None, timeout_seconds=15):
        raise _http_404(url)

    monkeypatch.setattr(airtable, "patch_json", fake_patch_json)
    with pytest.raises(NotFoundError):
        AirtableVendorRepository(_settings()).set_vendor_status("recMissing", "Inactive")


def _submission_record(record_id: str, status: str = "Pending", **fields):
    base = {
        "BusinessName": "B",
        "ContactName": "C",
        "Phone": "P",
        "Email": "E",
        "Address": "A",
        "Services": "Dead Horse Removal",
        "SubmissionStatus": status,
        "SubmittedAt": "2026-02-01T12:00:00Z",
    }
    base.update(fields)
    return {"id": record_id, "fields": base}


def test_transition_checks_status_then_patches(monkeypatch):
    patched = {}

    def fake_patch_json(url, *, payload, headers=None, timeout_seconds=15):
        patched["url"] = url
        patched["payload"] = payload
        return {"id": "recS1"}

    monkeypatch.setattr(airtable, "get_json", lambda url, **k: _submission_record("recS1"))
    monkeypatch.setattr(airtable, "patch_json", fake_patch_json)

    updated = AirtableVendorRepository(_settings()).transition_submission("recS1", expected="Pending", new="Approved")

    assert updated.submission_status == "Approved"
    assert updated.business_name == "B"
    assert patched["url"].endswith("/Vendor%20Submissions/recS1")
    assert patched["payload"] == {"fields": {"SubmissionStatus": "Approved"}}


def test_transition_refuses_wrong_status_without_patching(monkeypatch):
    def fake_patch_json(url, **kwargs):
        raise AssertionError("should not patch")

    monkeypatch.setattr(airtable, "get_json", lambda url, **k: _submission_record("recS1", status="Approved"))
    monkeypatch.setattr(airtable, "patch_json", fake_patch_json)

    with pytest.raises(SubmissionStateError):
        AirtableVendorRepository(_settings()).transition_submission("recS1", expected="Pending", new="Approved")


def test_transition_unknown_submission(monkeypatch):
    def fake_get_json(url, **kwargs):
        raise _http_404(url)

    monkeypatch.setattr(airtable, "get_json", fake_get_json)
    with pytest.raises(NotFoundError):
        AirtableVendorRepository(_settings()).transition_submission("recNope", expected="Pending", new="Rejected")


def test_configured_default_service_radius_applies_to_records(monkeypatch):
    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):
        return {"records": [_record("noRadius"), _record("withRadius", ServiceRadius=60)]}

    monkeypatch.setattr(airtable, "get_json", fake_get_json)
    settings = Settings.model_validate(
        {
            "storage": {"backend": "airtable", "airtable": {"api_key": "k", "base_id": "appBase"}},
            "discovery": {"default_service_radius_miles": 40},
        }
    )
    vendors = {v.id: v for v in AirtableVendorRepository(settings).fetch()}

    assert vendors["noRadius"].service_radius == 40
    assert vendors["withRadius"].service_radius == 60


def test_list_pending_skips_malformed_rows(monkeypatch):
    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):
        return {"records": [_submission_record("good"), _submission_record("bad", status="Archived")]}

    monkeypatch.setattr(airtable, "get_json", fake_get_json)
    assert [s.id for s in AirtableVendorRepository(_settings()).list_pending()] == ["good"]


def test_malformed_single_record_is_a_repository_error(monkeypatch):
    monkeypatch.setattr(airtable, "get_json", lambda url, **k: _record("recBad", Status="Deleted"))
    with pytest.raises(RepositoryError, match="recBad"):
        AirtableVendorRepository(_settings()).fetch_by_id("recBad")
