import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from housing.data.geo import LAT_MAX, LAT_MIN, LNG_MAX, LNG_MIN, GeoPoint
from housing.data.universities import list_universities
from housing.errors import GeolocationError, UnknownUniversityError
from housing.location.models import ReferencePoint, ReferenceSelection
from housing.location.service import StaticGeolocation, resolve_university, resolve_user_location
from housing.middleware import OptionalAPIKeyMiddleware, RequestLoggingMiddleware, RoutesSummary, get_valid_api_keys
from housing.monitoring.metrics import get_metrics
from housing.proximity.models import NearbyListingsRequest, NearbyListingsResponse
from housing.proximity.service import ProximityFilter, find_nearest_university, nearest_first, within_radius
from housing.routing.enricher import RouteEnricher
from housing.routing.models import RouteKind, RoutesRequest, RoutesResponse
from settings import get_settings

settings = get_settings()

# Structured logging: include module and level; handlers can add JSON later
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=["100/minute"])
proximity_filter = ProximityFilter(default_radius_km=settings.default_radius_km)


def _validate_lat_lng(lat: float, lng: float) -> None:
    if not (LAT_MIN <= lat <= LAT_MAX):
        raise HTTPException(status_code=400, detail=f"lat must be between {LAT_MIN} and {LAT_MAX}")
    if not (LNG_MIN <= lng <= LNG_MAX):
        raise HTTPException(status_code=400, detail=f"lng must be between {LNG_MIN} and {LNG_MAX}")


def _university_dict(university) -> dict:
    return university._asdict()


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.route_enricher = RouteEnricher(settings.routing_config())
    if not app.state.route_enricher.road_routing_enabled:
        logger.info("telemetry road_routing_disabled reason=no_credential")
    yield
    await app.state.route_enricher.aclose()
    app.state.route_enricher = None


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(GeolocationError)
def geolocation_error_handler(request: Request, exc: GeolocationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(UnknownUniversityError)
def unknown_university_handler(request: Request, exc: UnknownUniversityError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception):
    """Return consistent JSON error for unhandled exceptions (500). Skip validation/HTTP errors."""
    from fastapi.exceptions import RequestValidationError
    if isinstance(exc, (HTTPException, RequestValidationError)):
        raise exc
    logger.exception("telemetry unhandled_exception path=%s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred. Please try again later."},
    )


# Order: last added = innermost. So RequestLogging runs first (outermost), then Auth, then CORS.
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    OptionalAPIKeyMiddleware,
    api_key_required=settings.api_key_required,
    api_keys=get_valid_api_keys(settings.api_keys),
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _resolve_reference(selection: ReferenceSelection) -> ReferencePoint | None:
    """university_id wins over device coordinates; neither means no reference selected."""
    if selection.university_id is not None:
        return resolve_university(selection.university_id)
    if selection.has_user_location:
        return resolve_user_location(StaticGeolocation(selection.latitude, selection.longitude))
    return None


@app.get("/favicon.ico", include_in_schema=False)
@limiter.exempt
def favicon(request: Request):
    return Response(status_code=204)


@app.get("/health")
@limiter.exempt
def health(request: Request):
    logger.info("telemetry route=health")
    return {"status": "ok"}


@app.get("/metrics")
@limiter.exempt
def metrics(request: Request):
    return get_metrics()


@app.get("/universities")
def universities(request: Request):
    return {"universities": [_university_dict(u) for u in list_universities()]}


@app.get("/universities/nearest")
def nearest_university(request: Request, lat: float, lng: float):
    """Closest catalog university to the user's location (within the configured max distance)."""
    _validate_lat_lng(lat, lng)
    university = find_nearest_university(
        GeoPoint(latitude=lat, longitude=lng),
        list_universities(),
        max_km=settings.nearest_university_max_km,
    )
    if university is None:
        raise HTTPException(
            status_code=404,
            detail=f"No university within {settings.nearest_university_max_km:g} km. Select one manually.",
        )
    return _university_dict(university)


@app.post("/listings/nearby", response_model=NearbyListingsResponse)
def listings_nearby(request: Request, body: NearbyListingsRequest):
    """
    Annotate listings with straight-line distance to the selected university or
    user location. Listings with unknown coordinates are left out.
    """
    reference = _resolve_reference(body)
    radius_km = body.radius_km if body.radius_km is not None else proximity_filter.default_radius_km
    annotations = proximity_filter.annotate(
        reference.point if reference else None,
        body.listings,
        radius_km,
    )
    if body.only_within_radius:
        annotations = within_radius(annotations)
    if body.sort == "nearest":
        annotations = nearest_first(annotations)
    logger.info(
        "telemetry route=listings_nearby listings=%s annotated=%s radius_km=%s",
        len(body.listings),
        len(annotations),
        radius_km,
    )
    return NearbyListingsResponse(reference=reference, radius_km=radius_km, annotations=annotations)


@app.post("/routes", response_model=RoutesResponse)
@limiter.limit("30/minute")
async def routes(request: Request, body: RoutesRequest):
    """
    Road routes (or straight-line fallbacks) from the reference point to each destination.
    Provider failures never fail the request.
    """
    reference = _resolve_reference(body)
    if reference is None:
        raise HTTPException(status_code=400, detail="Select a university or share your location.")
    enricher: RouteEnricher | None = getattr(app.state, "route_enricher", None)
    if enricher is None:
        raise HTTPException(status_code=503, detail="Routing is not ready. Please try again.")
    results = await enricher.enrich_batch(
        reference.point,
        body.destinations,
        mode=body.mode,
        batch_size=body.batch_size,
    )
    road = sum(1 for r in results.values() if r.kind == RouteKind.ROAD)
    request.state.routes_summary = RoutesSummary(mode=body.mode.value, road=road, straight=len(results) - road)
    logger.info(
        "telemetry route=routes destinations=%s routed=%s mode=%s",
        len(body.destinations),
        len(results),
        body.mode.value,
    )
    return RoutesResponse(reference=reference, mode=body.mode, routes=list(results.values()))
