import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tailsort.api.routes import router
from tailsort.settings import ensure_runtime_dirs

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")

ensure_runtime_dirs()

app = FastAPI(title="tailsort API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
