import logging

from flask import Blueprint, abort, current_app, flash, g, render_template, request

from libya_auto.api import ApiClient, ApiError, fetch_all
from libya_auto.formatting import as_list, entity_id, model_options

logger = logging.getLogger(__name__)

bp = Blueprint("storefront", __name__, url_prefix="/<any(en, ar):locale>")

# search form values that mean "no filter"
ANY_VALUES = {"type": "all-types", "brand": "all-makes", "model": "all-models"}


def api():
    return ApiClient(current_app.config["API_URL"], timeout=current_app.config["API_TIMEOUT"])


@bp.route("/")
def home():
    client = api()
    # fetch_all runs off the request thread, so read g here
    lang = g.locale
    try:
        data = fetch_all(
            slides=lambda: client.get("/hero-slides/active-slides"),
            brands=lambda: client.get("/brands/all-brands"),
            cars=lambda: client.get("/cars", {"lang": lang}),
            posts=lambda: client.get("/blog/published", {"limit": "3"}),
        )
    except ApiError as exc:
        logger.warning("home page data failed: %s", exc)
        flash(g.t("errors.load"), "error")
        data = {}
    slides = sorted(as_list(data.get("slides")), key=lambda s: s.get("order", 0))
    cars = as_list(data.get("cars"))
    return render_template(
        "home.html",
        slides=slides,
        brands=as_list(data.get("brands")),
        models=model_options(cars),
        criteria={},
        cars=cars[:8],
        posts=as_list(data.get("posts")),
    )


@bp.route("/vehicles")
def vehicles():
    try:
        cars = as_list(api().get("/cars/all-cars"))
    except ApiError as exc:
        logger.warning("vehicle list failed: %s", exc)
        flash(g.t("errors.load"), "error")
        cars = []
    return render_template("vehicles.html", cars=cars)


@bp.route("/vehicles/<car_id>")
def vehicle_detail(car_id):
    client = api()
    try:
        car = client.get(f"/cars/{car_id}")
    except ApiError as exc:
        logger.warning("vehicle %s failed: %s", car_id, exc)
        if exc.status_code == 404:
            abort(404)
        flash(g.t("errors.load"), "error")
        return render_template("vehicle_detail.html", car=None, similar=[])
    try:
        similar = as_list(client.get(f"/cars/{car_id}/similar"))
    except ApiError as exc:
        logger.info("similar cars for %s unavailable: %s", car_id, exc)
        similar = []
    similar = [c for c in similar if entity_id(c) != entity_id(car)]
    return render_template("vehicle_detail.html", car=car, similar=similar)


def search_params(args):
    params = {}
    for key, any_value in ANY_VALUES.items():
        value = (args.get(key) or "").strip()
        if value and value != any_value:
            params[key] = value
    return params


@bp.route("/search")
def search():
    criteria = {k: request.args.get(k) for k in ANY_VALUES if request.args.get(k)}
    params = search_params(request.args)
    client = api()
    calls = {
        "brands": lambda: client.get("/brands/all-brands"),
        "catalog": lambda: client.get("/cars/all-cars"),
    }
    if criteria:
        calls["cars"] = lambda: client.get("/cars/search", params)
    error = None
    try:
        data = fetch_all(**calls)
        cars = data.get("cars", data["catalog"])
        if not isinstance(cars, list):
            raise ApiError("Invalid response format: expected an array")
    except ApiError as exc:
        logger.warning("search %s failed: %s", params, exc)
        error = exc.detail or g.t("errors.search")
        data, cars = {}, []
    return render_template(
        "search.html",
        cars=cars,
        criteria=criteria,
        error=error,
        brands=as_list(data.get("brands")),
        # the model list narrows to the chosen make
        models=model_options(as_list(data.get("catalog")), params.get("brand")),
    )


@bp.route("/new-cars")
def new_cars():
    try:
        brands = as_list(api().get("/brands/all-brands"))
    except ApiError as exc:
        logger.warning("brand list failed: %s", exc)
        flash(g.t("errors.load"), "error")
        brands = []
    return render_template("new_cars.html", brands=brands)


@bp.route("/new-cars/<brand_name>")
def brand_cars(brand_name):
    client = api()
    try:
        brands = as_list(client.get("/brands/all-brands"))
        brand = next((b for b in brands if (b.get("name") or "").lower() == brand_name.lower()), None)
        if brand is None:
            abort(404)
        cars = as_list(client.get("/cars", {"brand": entity_id(brand)}))
    except ApiError as exc:
        logger.warning("cars for brand %s failed: %s", brand_name, exc)
        flash(g.t("errors.load"), "error")
        brand, cars = {"name": brand_name}, []
    return render_template("brand_cars.html", brand=brand, cars=cars)


@bp.route("/blog")
def blog():
    try:
        posts = as_list(api().get("/blog/published"))
    except ApiError as exc:
        logger.warning("blog list failed: %s", exc)
        flash(g.t("errors.load"), "error")
        posts = []
    return render_template("blog.html", posts=posts)


@bp.route("/blog/<slug>")
def blog_post(slug):
    try:
        post = api().get(f"/blog/slug/{slug}")
    except ApiError as exc:
        logger.warning("blog post %s failed: %s", slug, exc)
        if exc.status_code == 404:
            abort(404)
        flash(g.t("errors.load"), "error")
        post = None
    return render_template("blog_post.html", post=post)


@bp.route("/contact")
def contact():
    return render_template("contact.html")
