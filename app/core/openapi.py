"""OpenAPI metadata and customization utilities.

Provides a helper to enrich the generated OpenAPI schema with:
- Bearer security scheme, required by default and lifted for /health
- Tags metadata
- Request body and query parameter schemas, which are parsed after
  authentication and therefore invisible to FastAPI's introspection
- Optional bearer auth on the public read endpoints
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI
from pydantic import BaseModel

from app.schemas.follow import FollowRequest
from app.schemas.leaderboard import LeaderboardQuery
from app.schemas.profile import ProfileQuery
from app.schemas.review import ReviewRequest

_REQUEST_BODIES: dict[str, type[BaseModel]] = {
    "/follow": FollowRequest,
    "/reviews": ReviewRequest,
}

_QUERY_MODELS: dict[str, type[BaseModel]] = {
    "/leaderboard": LeaderboardQuery,
    "/profile": ProfileQuery,
}


def _json_body(model: type[BaseModel]) -> Dict[str, Any]:
    return {
        "required": True,
        "content": {"application/json": {"schema": model.model_json_schema()}},
    }


def _query_parameters(model: type[BaseModel]) -> list[Dict[str, Any]]:
    properties = model.model_json_schema()["properties"]
    parameters = []
    for name, field in model.model_fields.items():
        key = field.alias or name
        parameters.append(
            {
                "name": key,
                "in": "query",
                "required": field.is_required(),
                "schema": properties[key],
            }
        )
    return parameters


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add security, tags and bodies."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "BearerAuth",
            {
                "type": "http",
                "scheme": "bearer",
                "description": "Access token issued by the auth provider.",
            },
        )
        schema.setdefault("security", [{"BearerAuth": []}])

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {"name": "Social", "description": "Follow and unfollow users."},
            {"name": "Reviews", "description": "Create or update cafe reviews."},
            {"name": "Leaderboard", "description": "Ranked reviewers and cafes."},
            {"name": "Profiles", "description": "Public user profiles."},
            {"name": "Health", "description": "Liveness checks."},
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        paths = schema.get("paths", {})
        for path, methods in paths.items():
            if path.endswith("/health"):
                for method_obj in methods.values():
                    if isinstance(method_obj, dict):
                        method_obj["security"] = []
            query_model = _QUERY_MODELS.get(path)
            if query_model is not None and isinstance(methods.get("get"), dict):
                methods["get"].setdefault("parameters", []).extend(_query_parameters(query_model))
                # Anonymous or authenticated
                methods["get"]["security"] = [{}, {"BearerAuth": []}]
            model = _REQUEST_BODIES.get(path)
            if model is not None and isinstance(methods.get("post"), dict):
                methods["post"].setdefault("requestBody", _json_body(model))

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
