"""Admin form parsing.

Each ``*_form`` reads a submitted form and returns ``(data, errors)`` where
``errors`` holds translation keys. Only presence and minimum-length checks are
made here; the backend owns every other rule.
"""
import json
import re

from werkzeug.utils import secure_filename

from libya_auto import config
from libya_auto.formatting import split_list

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def allowed_file(filename):
    return "." in filename and filename.rsplit(".", 1)[1].lower() in config.ALLOWED_EXTENSIONS


def upload_fields(files, name):
    """Multipart file fields for every acceptable upload under ``name``."""
    fields = []
    for f in files.getlist(name):
        if f and f.filename and allowed_file(f.filename):
            fields.append((name, (secure_filename(f.filename), f.read(), f.mimetype or "application/octet-stream")))
    return fields


def _strip(form, keys):
    return {k: form.get(k, "").strip() for k in keys}


def _min_length(data, key, n, errors):
    if len(data.get(key, "")) < n:
        errors.append(f"errors.{key}")


def car_form(form):
    data = _strip(form, ["model", "type", "price", "description", "importer"])
    data["brands"] = [b for b in form.getlist("brands") if b]
    errors = []
    _min_length(data, "model", 2, errors)
    if data["type"] not in config.CAR_TYPES:
        errors.append("errors.type")
    _min_length(data, "price", 1, errors)
    _min_length(data, "description", 10, errors)
    _min_length(data, "importer", 1, errors)
    if not data["brands"]:
        errors.append("errors.brands")
    return data, errors


def brand_form(form):
    data = _strip(form, ["name"])
    errors = []
    _min_length(data, "name", 2, errors)
    return data, errors


def importer_form(form):
    data = _strip(form, ["name", "address", "telephone", "email"])
    data["brands"] = [b for b in form.getlist("brands") if b]
    errors = []
    for key in ("name", "address", "telephone"):
        _min_length(data, key, 2, errors)
    if not EMAIL_RE.match(data["email"]):
        errors.append("errors.email")
    if not data["brands"]:
        errors.append("errors.brands")
    return data, errors


def blog_form(form):
    data = _strip(form, ["title", "excerpt", "content"])
    errors = []
    for key in ("title", "excerpt", "content"):
        _min_length(data, key, 1, errors)
    # the backend expects JSON-encoded arrays inside the multipart body
    data["categories"] = json.dumps(split_list(form.get("categories")))
    data["tags"] = json.dumps(split_list(form.get("tags")))
    data["published"] = form.get("published") in ("on", "true", "1")
    return data, errors


def slide_form(form):
    data = _strip(form, ["title", "description", "buttonText", "buttonLink"])
    data["isActive"] = form.get("isActive") in ("on", "true", "1")
    errors = []
    _min_length(data, "title", 1, errors)
    return data, errors
