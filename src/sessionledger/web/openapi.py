from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="SessionLedger API",
            version="0.1.0",
            summary="Anonymous-first sessions with evidence reconciliation and user association",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "description": "Session credential as bearer token",
            },
            "SessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": "sid",
                "description": "Session credential stored in cookie",
            },
        }

        # Apply security globally (will be overridden for public endpoints)
        openapi_schema["security"] = [
            {"BearerAuth": []},
            {"SessionCookie": []},
        ]

        # Restore accepts a missing or invalid credential
        public_endpoints = {
            ("POST", "/api/v1/me/restore"),
            ("GET", "/health"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in public_endpoints:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Invalid or expired session", "type": "authentication_error"},
                {"message": "User not found", "type": "not_found"},
                {"message": "Evidence cannot have more than 32 fields", "type": "validation_error"},
            ]
        }
    }
