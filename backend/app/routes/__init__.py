from fastapi import APIRouter
from app.routes import analytics, forecast, transactions

api_router = APIRouter()

api_router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(forecast.router, prefix="/forecast", tags=["forecast"])
