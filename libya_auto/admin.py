import logging
from collections import Counter

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from libya_auto import forms
from libya_auto.api import ApiError, fetch_all
from libya_auto.auth import AuthError, get_auth, login_required
from libya_auto.formatting import as_list, entity_id

logger = logging.getLogger(__name__)

bp = Blueprint("admin", __name__, url_prefix="/<any(en, ar):locale>/admin")


def client():
    return get_auth().client()


def _list(endpoint):
    try:
        data = client().get(endpoint)
    except ApiError as exc:
        logger.error("Error fetching %s: %s", endpoint, exc)
        flash(g.t("errors.load"), "error")
        return []
    return as_list(data)


def _fetch(endpoint):
    try:
        return client().get(endpoint)
    except ApiError as exc:
        logger.error("Error fetching %s: %s", endpoint, exc)
        if exc.status_code == 404:
            abort(404)
        flash(g.t("errors.load"), "error")
        return None


def _submit(send, endpoint, ok_key, *args, **kwargs):
    """Run one write call and flash the outcome; True on success."""
    try:
        send(endpoint, *args, **kwargs)
    except ApiError as exc:
        logger.error("Error writing %s: %s", endpoint, exc)
        flash(exc.detail or g.t("errors.save"), "error")
        return False
    flash(g.t(ok_key), "success")
    return True


def _flash_errors(errors):
    for key in errors:
        flash(g.t(key), "error")


# --- session ---

@bp.route("/login", methods=["GET", "POST"])
def login():
    auth = get_auth()
    if request.method == "GET":
        if auth.is_authenticated:
            return redirect(url_for("admin.dashboard"))
        return render_template("admin/login.html")
    username = request.form.get("username", "").strip()
    password = request.form.get("password", "")
    if not username or not password:
        flash(g.t("errors.credentials"), "error")
        return render_template("admin/login.html", username=username), 400
    try:
        auth.login(username, password)
    except AuthError as exc:
        flash(str(exc), "error")
        return render_template("admin/login.html", username=username), 401
    flash(g.t("admin.welcome", name=auth.user.get("username", username)), "success")
    return redirect(url_for("admin.dashboard"))


@bp.route("/logout", methods=["POST"])
def logout():
    get_auth().logout()
    flash(g.t("admin.logged_out"), "success")
    return redirect(url_for("admin.login"))


# --- dashboard ---

def dashboard_stats(importers, brands, cars):
    cars_by_importer = Counter(
        (c.get("importer") or {}).get("name", "Unknown") if isinstance(c.get("importer"), dict) else "Unknown"
        for c in cars
    )
    return {
        "totals": {"importers": len(importers), "brands": len(brands), "cars": len(cars)},
        "importer_brands": [
            {"name": i.get("name", ""), "count": len(i.get("brands") or [])} for i in importers
        ],
        "cars_by_importer": sorted(cars_by_importer.items(), key=lambda kv: -kv[1]),
    }


def _matches(query, *values):
    return not query or any(query in (v or "").lower() for v in values)


@bp.route("/")
@login_required
def dashboard():
    api = client()
    try:
        data = fetch_all(
            importers=lambda: api.get("/importers/all-importers"),
            brands=lambda: api.get("/brands/all-brands"),
            cars=lambda: api.get("/cars/all-cars"),
        )
    except ApiError as exc:
        logger.error("Error fetching dashboard data: %s", exc)
        flash(g.t("errors.load"), "error")
        data = {}
    importers = as_list(data.get("importers"))
    brands = as_list(data.get("brands"))
    cars = as_list(data.get("cars"))
    q = request.args.get("q", "").strip().lower()
    return render_template(
        "admin/dashboard.html",
        stats=dashboard_stats(importers, brands, cars),
        importers=[i for i in importers if _matches(q, i.get("name"), i.get("email"))],
        brands=[b for b in brands if _matches(q, b.get("name"))],
        cars=[
            c for c in cars
            if _matches(q, c.get("model"), (c.get("importer") or {}).get("name") if isinstance(c.get("importer"), dict) else "")
        ],
        q=q,
    )


# --- cars ---

def _car_choices():
    api = client()
    try:
        data = fetch_all(
            brands=lambda: api.get("/brands/all-brands"),
            importers=lambda: api.get("/importers/all-importers"),
        )
    except ApiError as exc:
        logger.error("Error fetching brands and importers: %s", exc)
        flash(g.t("errors.load"), "error")
        return {"brands": [], "importers": []}
    return {name: as_list(value) for name, value in data.items()}


def _car_values(car):
    return {
        "model": car.get("model", ""),
        "type": car.get("type", ""),
        "price": car.get("price", ""),
        "description": car.get("description", ""),
        "importer": entity_id(car.get("importer")) or "",
        "brands": [entity_id(b) for b in car.get("brands") or []],
    }


@bp.route("/cars")
@login_required
def cars():
    return render_template("admin/cars.html", cars=_list("/cars/all-cars"))


@bp.route("/cars/new", methods=["GET", "POST"])
@bp.route("/cars/<car_id>/edit", methods=["GET", "POST"])
@login_required
def car_form(car_id=None):
    if request.method == "GET":
        car = _fetch(f"/cars/{car_id}") if car_id else None
        values = _car_values(car) if car else {"brands": []}
        return render_template("admin/car_form.html", car_id=car_id, values=values,
                               photos=(car or {}).get("photos") or [], **_car_choices())
    data, errors = forms.car_form(request.form)
    if errors:
        _flash_errors(errors)
        return render_template("admin/car_form.html", car_id=car_id, values=data, photos=[],
                               **_car_choices()), 400
    files = forms.upload_fields(request.files, "photos")
    api = client()
    if car_id:
        ok = _submit(api.put_form, f"/cars/{car_id}", "admin.cars.updated", data, files)
    else:
        ok = _submit(api.post_form, "/cars/create", "admin.cars.created", data, files)
    if not ok:
        return render_template("admin/car_form.html", car_id=car_id, values=data, photos=[],
                               **_car_choices()), 502
    return redirect(url_for("admin.cars"))


@bp.route("/cars/<car_id>/delete", methods=["POST"])
@login_required
def car_delete(car_id):
    _submit(client().delete, f"/cars/{car_id}", "admin.cars.deleted")
    return redirect(url_for("admin.cars"))


# --- brands ---

@bp.route("/brands")
@login_required
def brands():
    return render_template("admin/brands.html", brands=_list("/brands/all-brands"))


@bp.route("/brands/new", methods=["GET", "POST"])
@bp.route("/brands/<brand_id>/edit", methods=["GET", "POST"])
@login_required
def brand_form(brand_id=None):
    if request.method == "GET":
        brand = _fetch(f"/brands/{brand_id}") if brand_id else None
        return render_template("admin/brand_form.html", brand_id=brand_id, values=brand or {})
    data, errors = forms.brand_form(request.form)
    if errors:
        _flash_errors(errors)
        return render_template("admin/brand_form.html", brand_id=brand_id, values=data), 400
    files = forms.upload_fields(request.files, "logo")
    if not brand_id and not files:
        flash(g.t("errors.logo"), "error")
        return render_template("admin/brand_form.html", brand_id=brand_id, values=data), 400
    api = client()
    if brand_id:
        ok = _submit(api.put_form, f"/brands/{brand_id}", "admin.brands.updated", data, files)
    else:
        ok = _submit(api.post_form, "/brands/create", "admin.brands.created", data, files)
    if not ok:
        return render_template("admin/brand_form.html", brand_id=brand_id, values=data), 502
    return redirect(url_for("admin.brands"))


@bp.route("/brands/<brand_id>/delete", methods=["POST"])
@login_required
def brand_delete(brand_id):
    _submit(client().delete, f"/brands/{brand_id}", "admin.brands.deleted")
    return redirect(url_for("admin.brands"))


# --- importers ---

def _importer_values(importer):
    values = dict(importer)
    values["brands"] = [entity_id(b) for b in importer.get("brands") or []]
    return values


@bp.route("/importers")
@login_required
def importers():
    return render_template("admin/importers.html", importers=_list("/importers/all-importers"))


@bp.route("/importers/new", methods=["GET", "POST"])
@bp.route("/importers/<importer_id>/edit", methods=["GET", "POST"])
@login_required
def importer_form(importer_id=None):
    all_brands = _list("/brands/all-brands")
    if request.method == "GET":
        importer = _fetch(f"/importers/{importer_id}") if importer_id else None
        values = _importer_values(importer) if importer else {"brands": []}
        return render_template("admin/importer_form.html", importer_id=importer_id,
                               values=values, brands=all_brands)
    data, errors = forms.importer_form(request.form)
    if errors:
        _flash_errors(errors)
        return render_template("admin/importer_form.html", importer_id=importer_id,
                               values=data, brands=all_brands), 400
    files = forms.upload_fields(request.files, "profileImage")
    api = client()
    if importer_id:
        ok = _submit(api.put_form, f"/importers/{importer_id}", "admin.importers.updated", data, files)
    else:
        ok = _submit(api.post_form, "/importers/create", "admin.importers.created", data, files)
    if not ok:
        return render_template("admin/importer_form.html", importer_id=importer_id,
                               values=data, brands=all_brands), 502
    return redirect(url_for("admin.importers"))


@bp.route("/importers/<importer_id>/delete", methods=["POST"])
@login_required
def importer_delete(importer_id):
    _submit(client().delete, f"/importers/{importer_id}", "admin.importers.deleted")
    return redirect(url_for("admin.importers"))


# --- blog ---

def _post_values(post):
    values = dict(post)
    values["categories"] = ", ".join(post.get("categories") or [])
    values["tags"] = ", ".join(post.get("tags") or [])
    return values


@bp.route("/blog")
@login_required
def blog():
    return render_template("admin/blog.html", posts=_list("/blog/all"))


@bp.route("/blog/new", methods=["GET", "POST"])
@bp.route("/blog/<post_id>/edit", methods=["GET", "POST"])
@login_required
def blog_form(post_id=None):
    if request.method == "GET":
        post = _fetch(f"/blog/{post_id}") if post_id else None
        values = _post_values(post) if post else {}
        return render_template("admin/blog_form.html", post_id=post_id, values=values)
    data, errors = forms.blog_form(request.form)
    if errors:
        _flash_errors(errors)
        return render_template("admin/blog_form.html", post_id=post_id, values=request.form), 400
    files = forms.upload_fields(request.files, "featuredImage")
    api = client()
    if post_id:
        ok = _submit(api.put_form, f"/blog/{post_id}", "admin.blog.updated", data, files)
    else:
        ok = _submit(api.post_form, "/blog/create", "admin.blog.created", data, files)
    if not ok:
        return render_template("admin/blog_form.html", post_id=post_id, values=request.form), 502
    return redirect(url_for("admin.blog"))


@bp.route("/blog/<post_id>/publish", methods=["POST"])
@login_required
def blog_toggle(post_id):
    published = request.form.get("published") == "true"
    _submit(client().put, f"/blog/{post_id}", "admin.blog.updated", {"published": published})
    return redirect(url_for("admin.blog"))


@bp.route("/blog/<post_id>/delete", methods=["POST"])
@login_required
def blog_delete(post_id):
    _submit(client().delete, f"/blog/{post_id}", "admin.blog.deleted")
    return redirect(url_for("admin.blog"))


# --- hero slides ---

def reorder_payload(slides, slide_id, direction):
    """Swap the order of a slide with its neighbour; None when it cannot move."""
    ids = [entity_id(s) for s in slides]
    if slide_id not in ids:
        return None
    idx = ids.index(slide_id)
    target = idx - 1 if direction == "up" else idx + 1
    if direction not in ("up", "down") or target < 0 or target >= len(slides):
        return None
    current, other = slides[idx], slides[target]
    return {
        "orders": [
            {"id": ids[idx], "order": other.get("order", target)},
            {"id": ids[target], "order": current.get("order", idx)},
        ]
    }


def _slides():
    return sorted(_list("/hero-slides/all-slides"), key=lambda s: s.get("order", 0))


@bp.route("/hero-slides")
@login_required
def slides():
    return render_template("admin/slides.html", slides=_slides())


@bp.route("/hero-slides/new", methods=["GET", "POST"])
@bp.route("/hero-slides/<slide_id>/edit", methods=["GET", "POST"])
@login_required
def slide_form(slide_id=None):
    if request.method == "GET":
        slide = None
        if slide_id:
            slide = next((s for s in _slides() if entity_id(s) == slide_id), None)
            if slide is None:
                abort(404)
        return render_template("admin/slide_form.html", slide_id=slide_id,
                               values=slide or {"isActive": True})
    data, errors = forms.slide_form(request.form)
    if errors:
        _flash_errors(errors)
        return render_template("admin/slide_form.html", slide_id=slide_id, values=data), 400
    files = forms.upload_fields(request.files, "image")
    api = client()
    if slide_id:
        ok = _submit(api.put_form, f"/hero-slides/{slide_id}", "admin.slides.updated", data, files)
    else:
        if not files:
            flash(g.t("errors.image"), "error")
            return render_template("admin/slide_form.html", slide_id=slide_id, values=data), 400
        data["order"] = len(_slides())
        ok = _submit(api.post_form, "/hero-slides/create", "admin.slides.created", data, files)
    if not ok:
        return render_template("admin/slide_form.html", slide_id=slide_id, values=data), 502
    return redirect(url_for("admin.slides"))


@bp.route("/hero-slides/<slide_id>/toggle", methods=["POST"])
@login_required
def slide_toggle(slide_id):
    active = request.form.get("isActive") == "true"
    _submit(client().put_form, f"/hero-slides/{slide_id}", "admin.slides.updated", {"isActive": active})
    return redirect(url_for("admin.slides"))


@bp.route("/hero-slides/<slide_id>/move/<direction>", methods=["POST"])
@login_required
def slide_move(slide_id, direction):
    payload = reorder_payload(_slides(), slide_id, direction)
    if payload is not None:
        _submit(client().put, "/hero-slides/reorder", "admin.slides.reordered", payload)
    return redirect(url_for("admin.slides"))


@bp.route("/hero-slides/<slide_id>/delete", methods=["POST"])
@login_required
def slide_delete(slide_id):
    _submit(client().delete, f"/hero-slides/{slide_id}", "admin.slides.deleted")
    return redirect(url_for("admin.slides"))
