import logging

from fastapi import FastAPI

from pkgfiles.api.files import router as files_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="pkgfiles",
    version="0.1.0",
    description="Serve single files out of versioned packages on a private npm registry.",
)


@app.get("/health")
async def health() -> dict:
    """
    Lightweight health check endpoint.
    """
    return {"status": "ok"}


app.include_router(files_router, tags=["files"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pkgfiles.main:app",
        host="0.0.0.0",
        port=8000,
    )
