from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pathlib import Path
import json
import os

app = FastAPI(title="Mock Core Directory", version="1.0.0")
# Support both local development and Docker
DATA_DIR = Path("/core_stub") if os.path.exists("/core_stub") else Path(__file__).resolve().parents[1] / "core_stub"

@app.get("/health")
def health(): return {"status": "ok"}

@app.get("/api/v1/clientes/tipo-entidad/{tipo_entidad}")
def list_by_entity_type(tipo_entidad: str):
    clients = json.loads((DATA_DIR / "clientes.json").read_text(encoding="utf-8"))
    return JSONResponse(content=[c for c in clients if c["tipoEntidad"] == tipo_entidad])
