"""Unit tests for placeholder title and zone parsing."""

import pytest

from slideforms.engine.models import Zone, ZonePosition, ZoneSpec
from slideforms.engine.titles import (
    build_zones,
    classify_zone,
    parse_title,
    qualify_zone_name,
    sort_zones,
)
from slideforms.interfaces.document import FieldType
from slideforms.interfaces.errors import ValidationError


# =============================================================================
# Title Parsing Tests
# =============================================================================


class TestParseTitle:
    """Test suite for parse_title."""

    def test_parses_three_tokens(self):
        """Test that type, group and name are decoded."""
        title = parse_title("dropdownlist.contact.country")

        assert title.field_type is FieldType.DROPDOWNLIST
        assert title.group == "contact"
        assert title.name == "country"

    def test_tokens_are_trimmed(self):
        """Test that whitespace around tokens is ignored."""
        title = parse_title("  textbox . g1 .name1 ")

        assert str(title) == "textbox.g1.name1"

    @pytest.mark.parametrize(
        "raw",
        ["textbox.g1", "textbox.g1.name.extra", "textbox..name", "", "textbox.g1. "],
    )
    def test_rejects_malformed_titles(self, raw):
        """Test that anything but three non-empty tokens is rejected."""
        with pytest.raises(ValidationError):
            parse_title(raw)

    def test_rejects_unknown_type(self):
        """Test that an unknown type token is rejected."""
        with pytest.raises(ValidationError, match="Unknown field type 'slider'"):
            parse_title("slider.g1.volume")

    def test_type_is_case_sensitive(self):
        """Test that type tokens must match the lowercase names."""
        with pytest.raises(ValidationError):
            parse_title("TextBox.g1.name1")


# =============================================================================
# Zone Tests
# =============================================================================


class TestZones:
    """Test suite for zone classification and ordering."""

    @pytest.mark.parametrize(
        "name,position",
        [
            ("header.left", ZonePosition.LEFT),
            ("footer.centerText", ZonePosition.CENTER),
            ("header.RIGHT", ZonePosition.RIGHT),
            ("footer.pageNumber", ZonePosition.UNCLASSIFIED),
        ],
    )
    def test_classify_zone(self, name, position):
        """Test classification by alignment keyword."""
        assert classify_zone(name) is position

    def test_qualify_zone_name(self):
        """Test that the strip prefix is added only once."""
        assert qualify_zone_name("header", "left") == "header.left"
        assert qualify_zone_name("header", "header.left") == "header.left"
        assert qualify_zone_name("footer", "header.left") == "footer.header.left"

    def test_zones_are_ordered_by_position(self):
        """Test LEFT < CENTER < RIGHT < unclassified with stable ties."""
        zones = build_zones(
            "header",
            {
                "extraA": {},
                "right": {},
                "left": {},
                "extraB": {},
                "center": {},
            },
        )

        assert [zone.name for zone in zones] == [
            "header.left",
            "header.center",
            "header.right",
            "header.extraA",
            "header.extraB",
        ]

    def test_sort_zones_is_stable(self):
        """Test that equal positions keep their input order."""
        spec = ZoneSpec()
        zones = [
            Zone(name="b", spec=spec, position=ZonePosition.RIGHT),
            Zone(name="a", spec=spec, position=ZonePosition.UNCLASSIFIED),
            Zone(name="c", spec=spec, position=ZonePosition.RIGHT),
            Zone(name="d", spec=spec, position=ZonePosition.LEFT),
        ]

        assert [zone.name for zone in sort_zones(zones)] == ["d", "b", "c", "a"]

    def test_accepts_zone_spec_instances(self):
        """Test that already-validated specs pass through."""
        spec = ZoneSpec(text="Confidential")
        zones = build_zones("footer", {"center": spec})

        assert zones[0].spec is spec

    def test_empty_strip(self):
        """Test that a missing strip yields no zones."""
        assert build_zones("footer", None) == []
        assert build_zones("footer", {}) == []

    def test_camel_case_keys(self):
        """Test that the wire keys are accepted."""
        zones = build_zones("header", {"left": {"yOffset": 5, "fontSize": 9, "borderColor": [1, 0, 0]}})

        spec = zones[0].spec
        assert spec.y_offset == 5
        assert spec.font_size == 9
        assert spec.border_color == [1.0, 0.0, 0.0]

    @pytest.mark.parametrize(
        "spec",
        [
            {"height": 0},
            {"alignment": "justify"},
            {"textColor": [2, 0, 0]},
            {"unknown": True},
        ],
    )
    def test_rejects_malformed_zone_specs(self, spec):
        """Test that invalid zone specs raise ValidationError."""
        with pytest.raises(ValidationError):
            build_zones("header", {"left": spec})

    def test_rejects_unknown_strip(self):
        """Test that only header and footer strips exist."""
        with pytest.raises(ValidationError):
            build_zones("sidebar", {"left": {}})
