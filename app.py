"""Application factory."""

import json
import os
import uuid
from typing import Optional

from flask import Flask, jsonify, g, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from notifications import AbstractMailer, OutboxMailer, SMTPMailer
from repositories import AbstractAccountRepository, SQLAlchemyAccountRepository
from routes.users import users_bp
from services import AccessPolicy, AccountService, PasswordHasher, TokenIssuer, TokenKind

migrate = Migrate()
jwt = JWTManager()


def create_app(
    config_class: type[Config] = Config,
    *,
    repository: Optional[AbstractAccountRepository] = None,
    mailer: Optional[AbstractMailer] = None,
) -> Flask:
    """Create and configure the Flask application.

    ``repository`` and ``mailer`` replace the configured collaborators, which
    is how tests and scripts plug in their own backends.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Session tokens are minted by TokenIssuer and checked by jwt_required
    app.config["JWT_DECODE_AUDIENCE"] = TokenKind.SESSION.audience

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Rate limiting
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "60 per minute")],
        storage_uri=app.config.get("RATELIMIT_STORAGE_URI", "memory://"),
        headers_enabled=app.config.get("RATELIMIT_HEADERS_ENABLED", True),
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    # Account service and its collaborators
    app.extensions["account_service"] = AccountService(
        repository=repository or SQLAlchemyAccountRepository(),
        mailer=mailer or _build_mailer(app),
        hasher=PasswordHasher(app.config["PASSWORD_HASH_METHOD"]),
        tokens=TokenIssuer.from_config(app.config),
        policy=AccessPolicy(),
        app_url=app.config["APP_URL"],
        sender=app.config["MAIL_DEFAULT_SENDER"],
        product_name=app.config["MAIL_PRODUCT_NAME"],
    )

    # Blueprints
    app.register_blueprint(users_bp, url_prefix="/users")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    # Errors
    _register_error_handlers(app)

    return app


def _build_mailer(app: Flask) -> AbstractMailer:
    """Return the mail backend selected by MAIL_BACKEND."""

    backend = (app.config.get("MAIL_BACKEND") or "smtp").lower()
    if backend == "memory":
        return OutboxMailer()
    if backend != "smtp":
        raise ValueError(f"Unknown MAIL_BACKEND {backend!r}; expected 'smtp' or 'memory'.")

    return SMTPMailer(
        host=app.config["MAIL_SERVER"],
        port=app.config["MAIL_PORT"],
        username=app.config.get("MAIL_USERNAME"),
        password=app.config.get("MAIL_PASSWORD"),
        use_tls=app.config.get("MAIL_USE_TLS", True),
    )


def _error_response(status_code: int, error: str, detail: str):
    request_id = g.get("request_id") or str(uuid.uuid4())
    response = jsonify({"error": error, "detail": detail, "request_id": request_id})
    response.status_code = status_code
    response.headers.setdefault("X-Request-ID", request_id)
    return response


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        request_id = g.get("request_id") or str(uuid.uuid4())
        response = error.get_response()
        payload = {
            "error": getattr(error, "name", "Error"),
            "detail": error.description,
            "request_id": request_id,
        }
        response.data = json.dumps(payload)
        response.content_type = "application/json"
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        app.logger.exception("Unhandled application error", exc_info=error)
        return _error_response(500, "Internal Server Error", "An unexpected error occurred.")


# Session token failures share the JSON error shape.
@jwt.unauthorized_loader
def _missing_token(reason: str):
    return _error_response(401, "Unauthorized", reason)


@jwt.invalid_token_loader
def _invalid_token(reason: str):
    return _error_response(401, "Unauthorized", reason)


@jwt.expired_token_loader
def _expired_token(jwt_header: dict, jwt_payload: dict):
    return _error_response(401, "Unauthorized", "Session token has expired.")


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
