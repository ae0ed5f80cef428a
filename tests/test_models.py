"""
Tests for Incidence Bot data models.
"""

from incidence_bot.services.models import (
    DistrictResponse,
    IncidenceReport,
    MessageKind,
    NotificationResult,
)


class TestDistrictResponse:
    """Tests for DistrictResponse model."""

    def test_full_payload(self, district_payload):
        """Test decoding a complete response."""
        response = DistrictResponse.model_validate(district_payload(week_incidence=87.3))
        record = response.get_district("09676")

        assert record is not None
        assert record.ags == "09676"
        assert record.population == 128756
        assert record.cases_per_week == 120
        assert record.deaths_per_week == 1
        assert record.week_incidence == 87.3
        assert record.cases_per_100k == 3270.5
        assert record.delta.cases == 18
        assert record.display_name == "LK Miltenberg"
        assert response.meta.source == "Robert Koch-Institut"
        assert response.meta.last_update == "2021-05-01T00:00:00.000Z"

    def test_partial_record(self):
        """Test that a record with only weekIncidence decodes."""
        response = DistrictResponse.model_validate(
            {"data": {"09676": {"weekIncidence": 200.7}}, "meta": {}}
        )
        record = response.get_district("09676")

        assert record.week_incidence == 200.7
        assert record.population == 0
        assert record.delta.deaths == 0
        assert response.meta.source is None

    def test_missing_district(self):
        """Test lookup of a district not in the response."""
        response = DistrictResponse.model_validate({"data": {}, "meta": {}})

        assert response.get_district("09676") is None

    def test_extra_fields_allowed(self):
        """Test that unknown API fields are tolerated."""
        response = DistrictResponse.model_validate(
            {"data": {"09676": {"weekIncidence": 1.0, "stateAbbreviation": "BY"}}, "meta": {}}
        )

        assert response.get_district("09676").week_incidence == 1.0

    def test_null_data_and_meta(self):
        """Test that null blocks decode to empty defaults."""
        response = DistrictResponse.model_validate({"data": None, "meta": None})

        assert response.data == {}
        assert response.meta.source is None
        assert response.get_district("09676") is None

    def test_null_record_fields(self):
        """Test that null record fields fall back to zero values."""
        response = DistrictResponse.model_validate({
            "data": {"09676": {"weekIncidence": None, "name": None, "delta": None}},
            "meta": {"lastUpdate": None},
        })
        record = response.get_district("09676")

        assert record.week_incidence == 0.0
        assert record.name == ""
        assert record.delta.cases == 0
        assert response.meta.last_update is None

    def test_null_record(self):
        """Test that a null district entry decodes to an empty record."""
        response = DistrictResponse.model_validate({"data": {"09676": None}})

        assert response.get_district("09676").week_incidence == 0.0

    def test_null_body(self):
        """Test that a null body decodes to an empty response."""
        response = DistrictResponse.model_validate(None)

        assert response.data == {}


class TestResultModels:
    """Tests for per-tick result dataclasses."""

    def test_incidence_report_to_dict(self):
        """Test IncidenceReport serialization."""
        report = IncidenceReport(
            district_key="09676",
            date="01.05.2021",
            incidence=200,
            threshold=165,
            alert=True,
            raw_incidence=200.7,
        )

        result = report.to_dict()

        assert result["incidence"] == 200
        assert result["alert"] is True
        assert result["key_found"] is True

    def test_notification_result_to_dict(self):
        """Test NotificationResult serialization."""
        result = NotificationResult(
            success=False,
            channel="discord",
            kind=MessageKind.ALERT,
            error="boom",
        )

        data = result.to_dict()

        assert data["kind"] == "alert"
        assert data["success"] is False
        assert data["error"] == "boom"
        assert "timestamp" in data
