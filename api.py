import logging

import uvicorn
from config import ApplicationConfig
from kairos.api.app import create_app

logging.basicConfig(
    level=ApplicationConfig.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app(ApplicationConfig)

if __name__ == "__main__":
    # One process is one browser context, so a single worker
    uvicorn.run(
        "api:app",
        host=ApplicationConfig.API_HOST,
        port=ApplicationConfig.API_PORT,
        reload=True,
        workers=1,
        log_level=ApplicationConfig.LOG_LEVEL.lower(),
    )
