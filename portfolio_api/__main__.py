import uvicorn

from .core import PORT

uvicorn.run("portfolio_api.app:app", host="0.0.0.0", port=PORT)
