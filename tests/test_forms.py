import io
import json

from werkzeug.datastructures import FileStorage, MultiDict

from libya_auto import forms


def test_car_form_valid():
    data, errors = forms.car_form(MultiDict([
        ("model", " Corolla "), ("type", "SEDAN"), ("price", "85000"),
        ("description", "Reliable family sedan"), ("importer", "imp1"),
        ("brands", "b1"), ("brands", "b2"),
    ]))
    assert errors == []
    assert data["model"] == "Corolla"
    assert data["brands"] == ["b1", "b2"]


def test_car_form_reports_each_problem():
    _, errors = forms.car_form(MultiDict([("model", "A"), ("type", "TRUCK"), ("description", "short")]))
    assert errors == [
        "errors.model", "errors.type", "errors.price",
        "errors.description", "errors.importer", "errors.brands",
    ]


def test_importer_form_checks_email():
    _, errors = forms.importer_form(MultiDict([
        ("name", "Alpha"), ("address", "Tripoli"), ("telephone", "0910000000"),
        ("email", "not-an-email"), ("brands", "b1"),
    ]))
    assert errors == ["errors.email"]


def test_blog_form_encodes_lists_as_json():
    data, errors = forms.blog_form(MultiDict([
        ("title", "Launch"), ("excerpt", "New models"), ("content", "<p>Hi</p>"),
        ("categories", "news, launches,"), ("tags", ""), ("published", "on"),
    ]))
    assert errors == []
    assert json.loads(data["categories"]) == ["news", "launches"]
    assert json.loads(data["tags"]) == []
    assert data["published"] is True


def test_upload_fields_filters_extensions_and_names():
    files = MultiDict([
        ("photos", FileStorage(io.BytesIO(b"img"), filename="../front view.jpg", content_type="image/jpeg")),
        ("photos", FileStorage(io.BytesIO(b"exe"), filename="virus.exe")),
    ])
    fields = forms.upload_fields(files, "photos")
    assert fields == [("photos", ("front_view.jpg", b"img", "image/jpeg"))]
