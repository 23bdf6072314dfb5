"""Unit tests for the PyMuPDF document engine."""

import asyncio

import fitz  # PyMuPDF
import pytest

from slideforms.engine.header_footer import HeaderFooterEngine
from slideforms.engine.service import FormService
from slideforms.interfaces.document import FieldRect, FontSpec, TextAlignment
from slideforms.interfaces.errors import FontError, StorageError, ValidationError
from slideforms.strategies.document_engines.pymupdf_engine import (
    PyMuPDFEngine,
    resolve_font,
    to_page_rect,
)
from tests.conftest import FakeTemplateSource, make_pdf, shape


def widgets_by_name(pdf: bytes) -> dict[str, list]:
    """Return the widgets of a PDF grouped by field name, with their page number."""
    doc = fitz.open(stream=pdf, filetype="pdf")
    found: dict[str, list] = {}
    for page in doc:
        for widget in page.widgets():
            found.setdefault(widget.field_name, []).append(
                {
                    "page": page.number + 1,
                    "rect": fitz.Rect(widget.rect),
                    "flags": widget.field_flags,
                    "value": widget.field_value,
                    "type": widget.field_type,
                }
            )
    doc.close()
    return found


class TestPyMuPDFEngine:
    """Test suite for PyMuPDFEngine."""

    @pytest.fixture
    def engine(self):
        return PyMuPDFEngine()

    # =========================================================================
    # Opening Tests
    # =========================================================================

    def test_open_invalid_pdf(self, engine):
        """Test that unreadable bytes raise StorageError."""
        with pytest.raises(StorageError):
            engine.open(b"this is not a pdf")

    def test_page_canvas(self, engine):
        """Test page count and page size."""
        with engine.open(make_pdf(pages=3, width=400, height=500)) as document:
            assert document.page_count == 3
            canvas = document.page_canvas(2)
            assert (canvas.width, canvas.height) == (400, 500)

    def test_page_out_of_range(self, engine, blank_pdf):
        """Test that field creation on a missing page is rejected."""
        with engine.open(blank_pdf) as document:
            with pytest.raises(ValidationError):
                document.create_text_field("t", 5, FieldRect(0, 0, 10, 10))

    def test_duplicate_field_name(self, engine, blank_pdf):
        """Test that field names are unique per document."""
        with engine.open(blank_pdf) as document:
            document.create_text_field("t", 0, FieldRect(0, 0, 10, 10))
            with pytest.raises(ValidationError):
                document.create_check_box("t", 0, FieldRect(0, 20, 10, 10))

    # =========================================================================
    # Font Tests
    # =========================================================================

    def test_standard_fonts(self):
        """Test the mapping of standard font names to widget fonts."""
        assert resolve_font(None) == ("Helv", None)
        assert resolve_font(FontSpec(standard="TimesRomanBold")) == ("TiRo", None)
        assert resolve_font(FontSpec(standard="Courier")) == ("Cour", None)

    def test_unknown_standard_font(self, engine, blank_pdf):
        """Test that an unknown standard font raises FontError."""
        with pytest.raises(FontError):
            engine.open(blank_pdf, font=FontSpec(standard="ComicSans"))

    def test_invalid_custom_font(self, engine, blank_pdf):
        """Test that a corrupt font payload raises FontError."""
        with pytest.raises(FontError):
            engine.open(blank_pdf, font=FontSpec(custom=b"not a font"))

    def test_both_fonts(self):
        """Test that standard and custom fonts are mutually exclusive."""
        with pytest.raises(FontError):
            FontSpec(standard="Helvetica", custom=b"\x00\x01")

    # =========================================================================
    # Field Tests
    # =========================================================================

    def test_rect_conversion(self):
        """Test the conversion from PDF user space to page space."""
        rect = to_page_rect(792, FieldRect(x=49.5, y=672.5, width=200, height=20))

        assert rect == fitz.Rect(49.5, 99.5, 249.5, 119.5)

    def test_text_field_round_trip(self, engine, blank_pdf):
        """Test that a text field is written with its name, value and flags."""
        with engine.open(blank_pdf) as document:
            text_field = document.create_text_field("textbox.g.name.page1", 0, FieldRect(50, 700, 200, 20))
            text_field.set_text("Ada")
            text_field.set_read_only(True)
            text_field.set_alignment(TextAlignment.CENTER)
            pdf = document.save()

        widgets = widgets_by_name(pdf)
        widget = widgets["textbox.g.name.page1"][0]
        assert widget["page"] == 1
        assert widget["value"] == "Ada"
        assert widget["flags"] & fitz.PDF_FIELD_IS_READ_ONLY
        assert widget["rect"].y0 == pytest.approx(792 - 700 - 20, abs=1)

    def test_choice_fields(self, engine, blank_pdf):
        """Test checkbox and dropdown values through a save and reload."""
        with engine.open(blank_pdf) as document:
            check_box = document.create_check_box("checkbox.g.agree.page1", 0, FieldRect(50, 600, 12, 12))
            check_box.set_checked(True)
            dropdown = document.create_dropdown("dropdownlist.g.country.page2", 1, FieldRect(50, 600, 120, 20))
            dropdown.set_options(["NL", "DE", "FR"])
            dropdown.select("DE")
            pdf = document.save()

        with engine.open(pdf, reconstruct=False) as reopened:
            assert reopened.get_field("checkbox.g.agree.page1").get_value() is True
            loaded = reopened.get_field("dropdownlist.g.country.page2")
            assert loaded.options == ["NL", "DE", "FR"]
            assert loaded.get_value() == "DE"

    def test_dropdown_rejects_unknown_option(self, engine, blank_pdf):
        """Test that selecting a missing option raises ValidationError."""
        with engine.open(blank_pdf) as document:
            dropdown = document.create_dropdown("d", 0, FieldRect(50, 600, 120, 20))
            dropdown.add_options(["a"])
            with pytest.raises(ValidationError):
                dropdown.select("b")

    def test_radio_group(self, engine, blank_pdf):
        """Test that radio options share one group name."""
        with engine.open(blank_pdf) as document:
            radio = document.create_radio_group("radiobutton.size.page1")
            radio.add_option("radiobutton.size.small.page1", 0, FieldRect(50, 600, 12, 12))
            radio.add_option("radiobutton.size.large.page1", 0, FieldRect(80, 600, 12, 12))
            radio.select("radiobutton.size.large.page1")
            assert radio.options == ["radiobutton.size.small.page1", "radiobutton.size.large.page1"]
            pdf = document.save()

        widgets = widgets_by_name(pdf)
        assert len(widgets["radiobutton.size.page1"]) == 2
        assert all(w["type"] == fitz.PDF_WIDGET_TYPE_RADIOBUTTON for w in widgets["radiobutton.size.page1"])

        with engine.open(pdf, reconstruct=False) as reopened:
            assert reopened.get_field("radiobutton.size.page1").get_value() == "radiobutton.size.large.page1"

    def test_radio_unknown_selection(self, engine, blank_pdf):
        """Test that selecting a missing radio option fails at save."""
        with engine.open(blank_pdf) as document:
            radio = document.create_radio_group("radiobutton.size.page1")
            radio.add_option("radiobutton.size.small.page1", 0, FieldRect(50, 600, 12, 12))
            radio.select("radiobutton.size.medium.page1")
            with pytest.raises(ValidationError):
                document.save()

    def test_reconstruct_drops_existing_fields(self, engine, blank_pdf):
        """Test that a reconstructed document starts without fields."""
        with engine.open(blank_pdf) as document:
            document.create_text_field("old", 0, FieldRect(50, 700, 100, 20))
            pdf = document.save()

        with engine.open(pdf) as document:
            assert document.fields() == []
            document.create_text_field("new", 0, FieldRect(50, 600, 100, 20))
            rebuilt = document.save()

        assert list(widgets_by_name(rebuilt)) == ["new"]

    # =========================================================================
    # End-To-End Tests
    # =========================================================================

    def test_header_footer_end_to_end(self, engine):
        """Test header/footer placement on a real two-page PDF."""
        with engine.open(make_pdf(pages=2)) as document:
            HeaderFooterEngine().apply(
                document,
                header={"left": {"text": "ACME"}, "right": {"text": "Draft", "alignment": "right"}},
                footer={"center": {"text": "Confidential", "fontSize": 8}},
            )
            pdf = document.save()

        widgets = widgets_by_name(pdf)
        assert set(widgets) == {
            "header.left.1",
            "header.right.1",
            "footer.center.1",
            "header.left.2",
            "header.right.2",
            "footer.center.2",
        }
        header = widgets["header.right.2"][0]
        assert header["page"] == 2
        assert header["value"] == "Draft"
        assert header["flags"] & fitz.PDF_FIELD_IS_READ_ONLY
        assert header["rect"].y0 == pytest.approx(0, abs=1)
        assert header["rect"].x0 == pytest.approx(306, abs=1)
        footer = widgets["footer.center.1"][0]
        assert footer["rect"].y1 == pytest.approx(792, abs=1)

    def test_form_values_end_to_end(self, engine, blank_pdf):
        """Test value read and write through the service on a real PDF."""
        service = FormService(engine=engine, template_source=FakeTemplateSource())
        with engine.open(blank_pdf) as document:
            document.create_text_field("textbox.g.name.page1", 0, FieldRect(50, 700, 200, 20)).set_text("Ada")
            document.create_check_box("checkbox.g.agree.page1", 0, FieldRect(50, 650, 12, 12))
            form = document.save()

        updated = asyncio.run(
            service.set_form_values(
                form,
                [
                    {"name": "textbox.g.name.page1", "value": "Grace"},
                    {"name": "checkbox.g.agree.page1", "value": True},
                ],
            )
        )
        values = {value.name: value.value for value in asyncio.run(service.get_form_values(updated))}

        assert values == {"textbox.g.name.page1": "Grace", "checkbox.g.agree.page1": True}

    def test_radio_pages_are_independent_end_to_end(self, engine):
        """Test that one radio placeholder on two pages yields two selectable groups."""
        slides = [
            [],
            [],
            [shape("radiobutton.size.small", top=100, width=12, height=12), shape("radiobutton.size.large", top=130, width=12, height=12)],
            [],
            [shape("radiobutton.size.small", top=100, width=12, height=12), shape("radiobutton.size.large", top=130, width=12, height=12)],
        ]
        service = FormService(engine=engine, template_source=FakeTemplateSource(slides, rendered=make_pdf(pages=5)))
        fields = [
            {"shapeTitle": "radiobutton.size.small", "methods": [{"method": "select", "value": "radiobutton.size.small"}]},
            {"shapeTitle": "radiobutton.size.large"},
        ]

        form = asyncio.run(service.create_form_from_template(b"PK-deck", fields)).pdf
        values = {value.name: value.value for value in asyncio.run(service.get_form_values(form))}
        assert values == {
            "radiobutton.size.page3": "radiobutton.size.small.page3",
            "radiobutton.size.page5": "radiobutton.size.small.page5",
        }

        updated = asyncio.run(
            service.set_form_values(form, [{"name": "radiobutton.size.page5", "value": "radiobutton.size.large.page5"}])
        )
        values = {value.name: value.value for value in asyncio.run(service.get_form_values(updated))}
        assert values == {
            "radiobutton.size.page3": "radiobutton.size.small.page3",
            "radiobutton.size.page5": "radiobutton.size.large.page5",
        }

    def test_header_footer_keeps_form_fields(self, engine, blank_pdf):
        """Test that adding a footer to a form leaves its fields in place."""
        service = FormService(engine=engine, template_source=FakeTemplateSource())
        with engine.open(blank_pdf) as document:
            document.create_text_field("textbox.g.name.page1", 0, FieldRect(50, 700, 200, 20)).set_text("Ada")
            form = document.save()

        pdf = asyncio.run(service.insert_header_footer(form, footer={"left": {"text": "x"}}))

        widgets = widgets_by_name(pdf)
        assert set(widgets) == {"textbox.g.name.page1", "footer.left.1", "footer.left.2"}
        assert widgets["textbox.g.name.page1"][0]["value"] == "Ada"
