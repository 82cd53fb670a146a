import logging
from typing import Optional
from fastapi import FastAPI, Depends, HTTPException, Query, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session
from .config import Settings, load_settings
from .db import Base, make_engine, make_session_factory
from .schemas import (
    AuthIn, AuthOut, RateRequestIn, ComsRequestIn, RateRequestOut, ComsRequestOut,
    ApiResponse, CustomerList, HealthOut
)
from .security import AuthorizationResult, OperatorGate
from .pricing_client import PricingClient, PricingBackendError
from .customers import fetch_customers
from .recents import add_recent_customer, get_recent_customers, clear_recent_customers
from .utils import search_customers, DEFAULT_SEARCH_LIMIT

logger = logging.getLogger(__name__)

NOT_AUTHORIZED = "Not authorized"


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()

def get_gate(request: Request) -> OperatorGate:
    return request.app.state.gate

def get_pricing(request: Request) -> PricingClient:
    return request.app.state.pricing


def authorize_or_403(gate: OperatorGate, init_data: str) -> AuthorizationResult:
    # Same response for every failing stage so callers can't tell which check failed
    try:
        decision = gate.authorize(init_data)
    except Exception:
        logger.exception("operator gate failed unexpectedly")
        raise HTTPException(403, NOT_AUTHORIZED)
    if not decision.permitted:
        raise HTTPException(403, NOT_AUTHORIZED)
    return decision


def forward_or_502(send, payload) -> ApiResponse:
    try:
        return ApiResponse.model_validate(send(payload))
    except ValidationError as e:
        logger.error("Pricing backend returned an unexpected body: %s", e)
        err = PricingBackendError("Pricing backend returned an unexpected response")
    except PricingBackendError as e:
        err = e
    raise HTTPException(502, err.message)


def _remember_customer(db: Session, decision: AuthorizationResult, client: str):
    if decision.user_id is None:
        return
    try:
        add_recent_customer(db, decision.user_id, client)
    except Exception:
        # recents are a convenience; the submission already went through
        db.rollback()
        logger.exception("could not record recent customer for %s", decision.user_id)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    if settings is None:
        settings = load_settings()  # raises ConfigurationError without a bot token
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    engine = make_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)

    app = FastAPI(title="BTZ Rate MiniApp")
    app.state.settings = settings
    app.state.gate = OperatorGate(settings.bot_token, settings.allowed_operator_ids,
                                  logger=logging.getLogger("app.security.gate"))
    app.state.pricing = PricingClient(settings.pricing_api_url, settings.pricing_api_timeout)
    app.state.session_factory = make_session_factory(engine)

    @app.get("/health", response_model=HealthOut)
    def health(pricing: PricingClient = Depends(get_pricing)):
        try:
            pricing.health_check()
            backend = "ok"
        except PricingBackendError as e:
            logger.warning("%s", e.message)
            backend = "unavailable"
        return HealthOut(status="ok", pricing=backend)

    # Lets the mini-app decide whether to show the operator forms at all
    @app.post("/api/auth", response_model=AuthOut)
    def auth(payload: AuthIn, gate: OperatorGate = Depends(get_gate)):
        try:
            decision = gate.authorize(payload.init_data)
        except Exception:
            logger.exception("operator gate failed unexpectedly")
            return AuthOut(permitted=False)
        return AuthOut(permitted=decision.permitted, user_id=decision.user_id)

    @app.post("/api/rate-request", response_model=ApiResponse)
    def rate_request(payload: RateRequestIn, gate: OperatorGate = Depends(get_gate),
                     pricing: PricingClient = Depends(get_pricing), db: Session = Depends(get_db)):
        decision = authorize_or_403(gate, payload.init_data)
        out = RateRequestOut(client=payload.client, side=payload.side, user_id=decision.user_id)
        result = forward_or_502(pricing.send_rate_request, out.model_dump())
        _remember_customer(db, decision, payload.client)
        return result

    @app.post("/api/coms-request", response_model=ApiResponse)
    def coms_request(payload: ComsRequestIn, gate: OperatorGate = Depends(get_gate),
                     pricing: PricingClient = Depends(get_pricing), db: Session = Depends(get_db)):
        decision = authorize_or_403(gate, payload.init_data)
        out = ComsRequestOut(
            client=payload.client, side=payload.side, currency=payload.currency,
            amount=payload.amount, rate=payload.rate, coms=payload.coms, user_id=decision.user_id,
        )
        result = forward_or_502(pricing.send_coms_request, out.model_dump())
        _remember_customer(db, decision, payload.client)
        return result

    @app.get("/api/customers", response_model=CustomerList)
    def customers(q: str = "", limit: int = Query(DEFAULT_SEARCH_LIMIT, ge=1)):
        names = fetch_customers(settings.customer_api_url, settings.customer_api_key)
        if q.strip():
            names = search_customers(q, names, limit)
        return CustomerList(customers=names)

    @app.post("/api/recent-customers", response_model=CustomerList)
    def recent_customers(payload: AuthIn, gate: OperatorGate = Depends(get_gate), db: Session = Depends(get_db)):
        decision = authorize_or_403(gate, payload.init_data)
        if decision.user_id is None:
            return CustomerList()
        return CustomerList(customers=get_recent_customers(db, decision.user_id))

    @app.delete("/api/recent-customers", response_model=CustomerList)
    def forget_recent_customers(payload: AuthIn, gate: OperatorGate = Depends(get_gate), db: Session = Depends(get_db)):
        decision = authorize_or_403(gate, payload.init_data)
        if decision.user_id is not None:
            clear_recent_customers(db, decision.user_id)
        return CustomerList()

    return app
