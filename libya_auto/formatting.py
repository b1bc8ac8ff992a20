from decimal import Decimal, InvalidOperation


def entity_id(item):
    if not isinstance(item, dict):
        return item
    return item.get("_id") or item.get("id")


def as_list(data):
    """Backend list endpoints sometimes answer with an object; treat that as empty."""
    return data if isinstance(data, list) else []


def format_price(price, locale="en", on_request="Price on request"):
    if price in (None, ""):
        return on_request
    try:
        value = Decimal(str(price).replace(",", ""))
    except InvalidOperation:
        return on_request
    if not value.is_finite():
        return on_request
    amount = f"{value:,.0f}"
    if locale == "ar":
        return f"{amount} د.ل"
    return f"LYD {amount}"


def brand_names(brands):
    """Brands arrive either populated (dicts) or as bare ids."""
    names = []
    for b in brands or []:
        names.append(b.get("name", "") if isinstance(b, dict) else str(b))
    return ", ".join(n for n in names if n)


def model_options(cars, brand_id=None):
    """Distinct model names, limited to cars carrying ``brand_id`` when one is given."""
    models = []
    for car in cars:
        if not isinstance(car, dict):
            continue
        model = (car.get("model") or "").strip()
        if not model or model in models:
            continue
        if brand_id and brand_id not in [entity_id(b) for b in car.get("brands") or []]:
            continue
        models.append(model)
    return models


def split_list(raw):
    return [part.strip() for part in (raw or "").split(",") if part.strip()]
