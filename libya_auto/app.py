import logging

from flask import Flask, g, render_template, request

from libya_auto import config, locale
from libya_auto.admin import bp as admin_bp
from libya_auto.auth import get_auth
from libya_auto.formatting import brand_names, entity_id, format_price
from libya_auto.i18n import load_dictionary
from libya_auto.images import format_image_path
from libya_auto.storefront import bp as storefront_bp

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = config.SECRET_KEY
app.config["API_URL"] = config.API_URL
app.config["API_TIMEOUT"] = config.API_TIMEOUT

locale.init_app(app)
app.register_blueprint(storefront_bp)
app.register_blueprint(admin_bp)


@app.url_value_preprocessor
def pull_locale(endpoint, values):
    if values and "locale" in values:
        g.locale = g.url_locale = values.pop("locale")


@app.url_defaults
def add_locale(endpoint, values):
    if "locale" in values or not g.get("locale"):
        return
    if app.url_map.is_endpoint_expecting(endpoint, "locale"):
        values["locale"] = g.locale


def _path_locale():
    segment = request.path.strip("/").split("/", 1)[0]
    return segment if segment in config.LOCALES else config.DEFAULT_LOCALE


@app.before_request
def load_translations():
    if g.get("locale") not in config.LOCALES:
        g.locale = _path_locale()
    g.t = load_dictionary(g.locale)


@app.context_processor
def inject_globals():
    return {
        "t": g.get("t") or load_dictionary(config.DEFAULT_LOCALE),
        "locale": g.get("locale", config.DEFAULT_LOCALE),
        "auth": get_auth(),
        "switch_locale_path": locale.switch_locale_path,
        "car_types": config.CAR_TYPES,
    }


@app.template_filter("image_url")
def image_url_filter(path):
    return format_image_path(path, app.config["API_URL"])


@app.template_filter("price")
def price_filter(price):
    t = g.get("t")
    on_request = t("common.price_on_request") if t else "Price on request"
    return format_price(price, g.get("locale", config.DEFAULT_LOCALE), on_request)


app.add_template_filter(brand_names, "brand_names")
app.add_template_filter(entity_id, "entity_id")


def _error_page(status):
    if not g.get("t"):
        g.locale = _path_locale()
        g.t = load_dictionary(g.locale)
    return render_template("error.html", status=status), status


@app.errorhandler(404)
def not_found(error):
    return _error_page(404)


@app.errorhandler(500)
def server_error(error):
    logger.error("Unhandled error on %s: %s", request.path, error)
    return _error_page(500)


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=3000, debug=True)
