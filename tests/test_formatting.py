from libya_auto.formatting import as_list, brand_names, format_price, model_options


def test_price_is_grouped_per_locale():
    assert format_price("85000", "en") == "LYD 85,000"
    assert format_price(1250000, "ar") == "1,250,000 د.ل"
    assert format_price("12,500", "en") == "LYD 12,500"


def test_unusable_price_is_on_request():
    for price in (None, "", "call us", "NaN", "Infinity", "-inf"):
        assert format_price(price, "en") == "Price on request"
    assert format_price("NaN", "ar", on_request="السعر عند الطلب") == "السعر عند الطلب"


def test_as_list_rejects_objects():
    assert as_list([1]) == [1]
    assert as_list({"message": "ok", "data": []}) == []
    assert as_list(None) == []


def test_model_options_narrow_to_brand():
    cars = [
        {"model": "Corolla", "brands": [{"_id": "b1"}]},
        {"model": "Corolla", "brands": ["b1"]},
        {"model": "Sportage", "brands": ["b2"]},
        {"model": " ", "brands": ["b1"]},
        "junk",
    ]
    assert model_options(cars) == ["Corolla", "Sportage"]
    assert model_options(cars, "b1") == ["Corolla"]


def test_brand_names_mixes_ids_and_objects():
    assert brand_names([{"name": "Kia"}, "b2", {}]) == "Kia, b2"
