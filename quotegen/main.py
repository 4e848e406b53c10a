"""HTTP entry points for QuoteGen.

Provides:
- POST /api/generate-quote - job description in, complete quote out
- GET /health - liveness check

Usage:
    python -m quotegen.main

Starts a Flask server (CORS enabled for the single-page front end) on
$PORT, default 5002.
"""

import asyncio
import os
from typing import Any, Callable, Dict, Optional

import structlog
from flask import Flask, jsonify, request
from flask_cors import CORS

from quotegen.config.errors import ConfigurationError, ErrorCode, QuoteGenError, ValidationError
from quotegen.config.log_config import configure_logging
from quotegen.config.settings import Settings
from quotegen.services.quote_pipeline import QuotePipeline

logger = structlog.get_logger(__name__)

GENERATE_QUOTE_PATH = "/api/generate-quote"
SERVICE_NAME = "quotegen"

PipelineFactory = Callable[[Settings], QuotePipeline]

# ============================================================================
# Helper Functions
# ============================================================================


def error_response(code: str, message: str, details: Any = None) -> Dict[str, Any]:
    """Build error response."""
    return {
        "error": message,
        "code": code,
        "details": details if details is not None else {}
    }


def _json_response(data: Dict[str, Any], status: int = 200):
    response = jsonify(data)
    response.status_code = status
    return response


def get_request_json() -> Dict[str, Any]:
    """Extract the JSON object from the request body.

    Raises:
        ValidationError: If the body is not a JSON object.
    """
    try:
        data = request.get_json(force=True)
    except Exception as e:
        raise ValidationError(
            message=f"Invalid JSON in request body: {str(e)}",
            code=ErrorCode.INVALID_JSON_BODY
        )

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(
            message="Request body must be a JSON object",
            code=ErrorCode.INVALID_JSON_BODY
        )
    return data


def get_job_description(data: Dict[str, Any]) -> str:
    """Return the trimmed jobDescription or raise ValidationError."""
    job_description = data.get("jobDescription")
    if not isinstance(job_description, str) or not job_description.strip():
        raise ValidationError(
            message="Missing job description",
            field="jobDescription",
            code=ErrorCode.MISSING_FIELD
        )
    return job_description.strip()


# ============================================================================
# Application
# ============================================================================


def create_app(
    settings: Optional[Settings] = None,
    pipeline_factory: Optional[PipelineFactory] = None
) -> Flask:
    """Build the Flask application.

    Settings are validated once here. An invalid configuration does not stop
    the app from starting; request bodies are still validated (400), and
    every well-formed quote request then answers 500 without any outbound
    calls.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level)
    pipeline_factory = pipeline_factory or QuotePipeline

    app = Flask(__name__)
    CORS(app)

    try:
        settings.validate()
        app.config["QUOTEGEN_CONFIG_ERROR"] = None
    except ConfigurationError as e:
        logger.error("configuration_invalid", problems=e.problems)
        app.config["QUOTEGEN_CONFIG_ERROR"] = e

    @app.route(GENERATE_QUOTE_PATH, methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    def generate_quote():
        """Generate a quote.

        Request body:
        {
            "jobDescription": "Build a 4x3m natural stone patio"
        }

        Response: the quote JSON (materials, method, customerQuote).
        """
        if request.method != "POST":
            return _json_response(
                error_response(ErrorCode.METHOD_NOT_ALLOWED, "Method Not Allowed"),
                status=405
            )

        try:
            job_description = get_job_description(get_request_json())

            config_error = app.config["QUOTEGEN_CONFIG_ERROR"]
            if config_error is not None:
                raise config_error

            logger.info("quote_request_received", description_length=len(job_description))

            pipeline = pipeline_factory(settings)
            quote = asyncio.run(pipeline.generate_quote(job_description))

            return _json_response(quote.to_response())

        except ValidationError as e:
            return _json_response(e.to_dict(), status=400)
        except QuoteGenError as e:
            logger.error("quote_generation_error", error=e.message, code=e.code)
            return _json_response(e.to_dict(), status=500)
        except Exception as e:
            logger.exception("quote_generation_exception", error=str(e))
            return _json_response(
                error_response(
                    ErrorCode.PIPELINE_FAILED,
                    "Failed to generate the quote.",
                    str(e)
                ),
                status=500
            )

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "service": SERVICE_NAME})

    return app


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5002))
    print(f"""
╔════════════════════════════════════════════════════════════════╗
║  QuoteGen - Local Development Server                           ║
╠════════════════════════════════════════════════════════════════╣
║  Server running on: http://127.0.0.1:{port}
║  Endpoints:                                                    ║
║  • POST {GENERATE_QUOTE_PATH}
║  • GET  /health                                                ║
╚════════════════════════════════════════════════════════════════╝
""")
    create_app().run(host="127.0.0.1", port=port, debug=False)
