from fastapi import FastAPI, HTTPException, Body
from fastapi.responses import JSONResponse
from pathlib import Path
import json
import os

app = FastAPI(title="Mock Plaid Server", version="1.0.0")
# Support both local development and Docker
DATA_DIR = Path("/plaid_stub") if os.path.exists("/plaid_stub") else Path(__file__).resolve().parents[1] / "plaid_stub"


def load_item(access_token: str) -> dict:
    file = DATA_DIR / f"item_{access_token}.json"
    if not file.exists():
        raise HTTPException(status_code=400, detail="INVALID_ACCESS_TOKEN")
    return json.loads(file.read_text())


@app.get("/health")
def health(): return {"status": "ok"}

@app.post("/link/token/create")
def link_token_create(body: dict = Body(...)):
    return {"link_token": f"link-sandbox-{body['user']['client_user_id']}", "expiration": "2099-01-01T00:00:00Z"}

@app.post("/item/public_token/exchange")
def public_token_exchange(body: dict = Body(...)):
    # public-sandbox-<name> exchanges to access-sandbox-<name>
    name = body["public_token"].removeprefix("public-sandbox-")
    return {"access_token": f"access-sandbox-{name}", "item_id": f"item-{name}"}

@app.post("/accounts/get")
def accounts_get(body: dict = Body(...)):
    item = load_item(body["access_token"])
    return JSONResponse(content={"accounts": item["accounts"]})

@app.post("/liabilities/get")
def liabilities_get(body: dict = Body(...)):
    item = load_item(body["access_token"])
    if "liabilities" not in item:
        raise HTTPException(status_code=400, detail="PRODUCTS_NOT_SUPPORTED")
    return JSONResponse(content={"accounts": item["accounts"], "liabilities": item["liabilities"]})
