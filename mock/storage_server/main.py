from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pathlib import Path
import json
import os

app = FastAPI(title="Mock Storage Server", version="1.0.0")
# Support both local development and Docker
DATA_DIR = Path("/storage_stub") if os.path.exists("/storage_stub") else Path(__file__).resolve().parents[1] / "storage_stub"


def _load(kind: str, user_id: str):
    file = DATA_DIR / f"{kind}_{user_id}.json"
    if not file.exists():
        raise HTTPException(status_code=404, detail="user not found")
    return json.loads(file.read_text())


@app.get("/health")
def health(): return {"status": "ok"}


@app.get("/transactions/{user_id}")
def get_transactions(user_id: str, limit: int = Query(500, ge=1)):
    return JSONResponse(content=_load("transactions", user_id)[:limit])


@app.get("/budget-categories/{user_id}")
def get_budget_categories(user_id: str):
    return JSONResponse(content=_load("budget_categories", user_id))


@app.get("/financial-profiles/{user_id}")
def get_financial_profile(user_id: str):
    return JSONResponse(content=_load("financial_profile", user_id))
