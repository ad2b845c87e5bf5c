from fastapi import FastAPI
from app_registry.api.routes.applications import router as applications_router

app = FastAPI(title="App Registry API")

@app.get("/health")
def health():
    return {"status": "ok"}

app.include_router(applications_router)
