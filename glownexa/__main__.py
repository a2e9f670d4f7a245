import uvicorn

from glownexa.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "glownexa.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
    )
