"""
Studio Feedback Desk - FastAPI Backend
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from backend.config import get_settings
from backend.routes import analytics, chat, health, sentiment
from backend.middleware.logging_middleware import LoggingMiddleware

settings = get_settings()

app = FastAPI(
    title="Studio Feedback Desk",
    description="Trainer feedback chat, ticket creation and ticket analytics",
    version="1.0.0"
)

# Middleware runs bottom-up: logging wraps the request before CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LoggingMiddleware)

# Router prefixes are defined in each route module
app.include_router(chat.router)
app.include_router(sentiment.router)
app.include_router(analytics.router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {"message": "Studio Feedback Desk API", "version": "1.0.0"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.fastapi_host, port=settings.fastapi_port)
