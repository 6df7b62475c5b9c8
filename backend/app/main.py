from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from core.config import settings
from core.error_handling import register_exception_handlers
from app.startup import configure_logging, run_startup_checks

# ========== Users ==========
from modules.auth.routes.user_routes import router as user_router

# ========== Restaurants ==========
from modules.restaurants.routes.restaurant_routes import router as restaurant_router

# ========== Cart & Orders ==========
from modules.cart.routes.cart_routes import router as cart_router
from modules.orders.routes.order_routes import router as order_router

# ========== Loyalty & Rewards ==========
from modules.loyalty.routes.loyalty_routes import router as loyalty_router
from modules.loyalty.routes.rewards_routes import router as rewards_router
from modules.loyalty.routes.challenge_routes import router as challenge_router

from app import models  # noqa: F401  registers every ORM model

configure_logging()

app = FastAPI(
    title="SwiftBite API",
    description="""
    Food delivery marketplace API.

    ## Features

    * **Restaurants** - Browse open restaurants and their menus
    * **Cart** - Per-user cart restricted to one restaurant
    * **Orders** - Placement, role-gated status changes and delivery partner assignment
    * **Loyalty** - Points ledger with tiers and order streaks
    * **Rewards** - Redeem points for codes, verify codes at checkout
    * **Challenges** - Enrol in time-boxed goals and earn bonus points

    ## Authentication

    Restaurant and menu browsing is public. All other endpoints require a
    bearer JWT whose `sub` claim is the user id.
    """,
    version="1.0.0",
    debug=settings.debug,
)

# Register exception handlers for consistent error responses
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(user_router)
app.include_router(restaurant_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(loyalty_router)
app.include_router(rewards_router)
app.include_router(challenge_router)


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok"}


@app.on_event("startup")
async def startup_event():
    """Run startup validation checks"""
    run_startup_checks()
