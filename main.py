import uvicorn

from jlpt_api.app import app
from jlpt_api.config import HOST, PORT


if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT)
