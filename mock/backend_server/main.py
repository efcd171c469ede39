from datetime import datetime, timezone
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pathlib import Path
import json

DATA_DIR = Path(__file__).resolve().parent / "fixtures"

PRIMARY_KEYS = {
    "transactions": "txn_id",
    "suspicious_transactions": "suspicious_id",
    "fraud_cases": "case_id",
    "case_decisions": "decision_id",
    "blacklisted_recipients": "id",
    "case_feedback": "feedback_id",
    "investigator_ratings": "rating_id",
}
UNIQUE_COLUMNS = {"blacklisted_recipients": "recipient_value"}


def load_fixtures(data_dir: Path = DATA_DIR) -> dict:
    return {f.stem: json.loads(f.read_text()) for f in sorted(data_dir.glob("*.json"))}


def _split_list(body: str) -> list:
    items, current, quoted, escaped = [], "", False, False
    for ch in body:
        if escaped:
            current += ch
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == '"':
            quoted = not quoted
        elif ch == "," and not quoted:
            items.append(current)
            current = ""
        else:
            current += ch
    if body:
        items.append(current)
    return items


def _comparable(value):
    text = str(value)
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def _matches(row: dict, column: str, expr: str) -> bool:
    value = row.get(column)
    if expr == "not.is.null":
        return value is not None
    op, _, operand = expr.partition(".")
    if op == "eq":
        return value is not None and str(value) == operand
    if op == "in":
        return value is not None and str(value) in _split_list(operand[1:-1])
    if op == "gte":
        return value is not None and _comparable(value) >= _comparable(operand)
    raise HTTPException(status_code=400, detail={"code": "PGRST100", "message": f"unsupported filter {expr}"})


def create_app(tables: dict | None = None) -> FastAPI:
    app = FastAPI(title="Mock Backend Server", version="1.0.0")
    state = tables if tables is not None else load_fixtures()

    def filtered(table: str, request: Request) -> list:
        rows = state.get(table, [])
        for column, expr in request.query_params.multi_items():
            if column == "select":
                continue
            rows = [r for r in rows if _matches(r, column, expr)]
        return rows

    @app.get("/health")
    def health(): return {"status": "ok"}

    @app.get("/rest/v1/{table}")
    def select(table: str, request: Request):
        if table not in state:
            raise HTTPException(status_code=404, detail={"code": "42P01", "message": f"relation {table} does not exist"})
        columns = request.query_params.get("select", "*")
        rows = filtered(table, request)
        if columns != "*":
            names = columns.split(",")
            rows = [{n: r.get(n) for n in names} for r in rows]
        return JSONResponse(content=rows)

    @app.post("/rest/v1/{table}")
    async def insert(table: str, request: Request):
        record = await request.json()
        rows = state.setdefault(table, [])
        unique = UNIQUE_COLUMNS.get(table)
        if unique and any(r.get(unique) == record.get(unique) for r in rows):
            return JSONResponse(
                status_code=409,
                content={"code": "23505", "message": f'duplicate key value violates unique constraint "{table}_{unique}_key"'},
            )
        pk = PRIMARY_KEYS.get(table)
        if pk and pk not in record:
            record[pk] = max((r.get(pk, 0) for r in rows), default=0) + 1
        record.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        rows.append(record)
        return JSONResponse(status_code=201, content=[record])

    @app.delete("/rest/v1/{table}")
    def delete(table: str, request: Request):
        doomed = filtered(table, request)
        state[table] = [r for r in state.get(table, []) if r not in doomed]
        return JSONResponse(content=doomed)

    return app


app = create_app()
