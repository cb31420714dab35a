"""
Django Ninja API configuration.
"""

import logging
from datetime import datetime, timezone

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from ninja import NinjaAPI
from ninja.errors import ValidationError, HttpError
from pydantic import ValidationError as PydanticValidationError

from apps.blog.exceptions import DuplicateSlugError, PostNotFoundError

logger = logging.getLogger(__name__)

api = NinjaAPI(
    title="Blog API",
    version=settings.API_VERSION,
    description="Blog post storage API",
)


@api.exception_handler(ValidationError)
def validation_errors(request: HttpRequest, exc: ValidationError) -> HttpResponse:
    return api.create_response(request, {"error": exc.errors}, status=422)


@api.exception_handler(PydanticValidationError)
def pydantic_validation_errors(request: HttpRequest, exc: PydanticValidationError) -> HttpResponse:
    return api.create_response(request, {"error": exc.errors()}, status=422)


@api.exception_handler(PostNotFoundError)
def post_not_found(request: HttpRequest, exc: PostNotFoundError) -> HttpResponse:
    return api.create_response(request, {"error": str(exc)}, status=404)


@api.exception_handler(DuplicateSlugError)
def duplicate_slug(request: HttpRequest, exc: DuplicateSlugError) -> HttpResponse:
    return api.create_response(request, {"error": str(exc)}, status=400)


@api.exception_handler(ValueError)
def value_error(request: HttpRequest, exc: ValueError) -> HttpResponse:
    return api.create_response(request, {"error": str(exc)}, status=400)


@api.exception_handler(HttpError)
def http_error_handler(request: HttpRequest, exc: HttpError) -> HttpResponse:
    return api.create_response(request, {"error": str(exc)}, status=exc.status_code)


@api.exception_handler(Exception)
def generic_error_handler(request: HttpRequest, exc: Exception) -> HttpResponse:
    logger.exception(f"[API] Unhandled error on {request.method} {request.path}")
    return api.create_response(request, {"error": str(exc)}, status=500)


# Health check
@api.get("/health")
def health_check(request: HttpRequest) -> dict:
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.API_VERSION,
    }


# Import and register routers
from apps.blog.api import router as blog_router

api.add_router("/posts", blog_router, tags=["Posts"])
