"""
SkillSwap API Server Entry Point

Use this file for deployment:
  uvicorn main:app --host 0.0.0.0 --port $PORT
"""

import logging
import os

from skillswap.api_server import create_app
from skillswap.config import SkillSwapConfig

config = SkillSwapConfig.from_env()

logging.basicConfig(
    level=config.log_level,
    format='%(asctime)s - %(levelname)s - %(message)s'
)

app = create_app(config)


@app.get("/")
def root():
    return {"message": "SkillSwap API running"}


# For local development
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", 8000)), reload=True)
