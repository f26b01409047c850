# header_scanner/main.py
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .router import relay_router, router

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Security Header Scanner",
    description="API to assess a site's security headers and probe for diagnostic HTTP methods.",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["monitoring"])
async def health_check():
    return {"status": "healthy"}


app.include_router(router)
app.include_router(relay_router)

if __name__ == "__main__":
    uvicorn.run("header_scanner.main:app", host="0.0.0.0", port=8000, reload=True)
