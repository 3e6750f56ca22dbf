import logging

import uvicorn

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    print("Starting Storyboard API Server...")
    print("Docs available at: http://localhost:8000/docs")

    uvicorn.run(
        "storyboard.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
