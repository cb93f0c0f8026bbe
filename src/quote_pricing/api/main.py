from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from quote_pricing import __version__
from quote_pricing.api.schemas import QuoteRequest
from quote_pricing.config.settings import get_settings
from quote_pricing.engine import PricingEngine, QuoteResult, ValidationError
from quote_pricing.guards.metadata import MetadataGuardError, validate_line_item_metadata, validate_quote_metadata
from quote_pricing.logging_config import get_logger, setup_logging
from quote_pricing.services.breakdown import debug_payload

settings = get_settings()
engine = PricingEngine(settings)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings)
    logger.info("api_started", version=__version__, default_currency=settings.default_currency)
    yield


app = FastAPI(
    title="Quote Pricing API",
    description="Exact-decimal quote pricing and tax calculation",
    version=__version__,
    lifespan=lifespan,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _price(req: QuoteRequest, with_trace: bool) -> QuoteResult:
    """Guard metadata, build the engine input and price it; invalid input is a 400."""
    try:
        validate_quote_metadata(req.metadata)
        for number, item in enumerate(req.line_items, start=1):
            validate_line_item_metadata(item.metadata, number)

        quote = req.to_quote(settings)
        if with_trace:
            result = engine.calculate_with_trace(quote)
        else:
            result = engine.calculate(quote)
    except (ValidationError, MetadataGuardError) as e:
        detail = e.to_dict()
        logger.warning("quote_rejected", field_path=detail["fieldPath"], constraint=detail["constraint"])
        raise HTTPException(status_code=400, detail=detail)

    logger.info(
        "quote_calculated",
        currency=result.currency,
        lines=len(result.line_calculations),
        grand_total=f"{result.totals.grand_total.amount:f}",
        trace=with_trace,
    )
    return result


@app.get("/")
async def root():
    return {"status": "online", "message": "Quote Pricing API Active", "version": __version__}


@app.post("/quotes/calculate")
async def calculate_quote(req: QuoteRequest):
    return _price(req, with_trace=False).to_dict()


@app.post("/quotes/calculate/debug")
async def calculate_quote_debug(req: QuoteRequest):
    return debug_payload(_price(req, with_trace=True), settings)


@app.get("/system/status")
async def get_status():
    return {
        "engine_active": True,
        "default_currency": settings.default_currency,
        "standard_tax_rate": f"{settings.standard_tax_rate:f}",
        "standard_tax_name": settings.standard_tax_name,
    }
