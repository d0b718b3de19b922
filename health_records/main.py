import csv
import io
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session
from starlette import status

from . import config
from .database import close_db, get_db, init_db
from .errors import HealthRecordError
from .schemas import (
    ErrorResponse,
    HealthAnalysis,
    HealthRecord,
    HealthRecordInput,
    HealthRecordWithAnalysis,
    MessageResponse,
)
from .service import HealthRecordService
from .store import HealthRecordStore, SqlAlchemyHealthRecordStore


logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 启动时建表，关闭时释放连接池
    init_db()
    logger.info("Database ready")
    yield
    close_db()
    logger.info("Database connections closed")


# FastAPI 实例，名字必须叫 app
app = FastAPI(title="Health Records - BMI Service", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# The body is validated by the service (after the existence check on update),
# so routes take a plain dict and only document HealthRecordInput.
RECORD_BODY = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": HealthRecordInput.model_json_schema()}},
    }
}

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_store(db: Session = Depends(get_db)) -> HealthRecordStore:
    return SqlAlchemyHealthRecordStore(db)


def get_service(store: HealthRecordStore = Depends(get_store)) -> HealthRecordService:
    return HealthRecordService(store)


@app.exception_handler(HealthRecordError)
async def health_record_error_handler(request: Request, exc: HealthRecordError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.details or exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("%s %s crashed", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "details": str(exc) or type(exc).__name__},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Malformed JSON, a body that is not an object, a non-integer id ...
    reported as 400 with the same error shape as everything else.
    """
    details = "; ".join(
        "{}: {}".format(".".join(str(part) for part in err.get("loc", ())), err.get("msg"))
        for err in exc.errors()
    )
    logger.warning("%s %s rejected: %s", request.method, request.url.path, details)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "details": details},
    )


@app.get(
    "/api/health-records",
    response_model=List[HealthRecord],
    responses=ERROR_RESPONSES,
)
def list_health_records(service: HealthRecordService = Depends(get_service)):
    """
    所有记录，最新的在前
    """
    return service.list_records()


@app.get("/api/health-records/export")
def export_health_records(service: HealthRecordService = Depends(get_service)):
    """
    Export every record as a CSV download (newest first).
    """
    records = service.list_records()

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(
        ["id", "name", "age", "height", "weight", "bmi", "bmiCategory", "createdAt"]
    )
    for r in records:
        writer.writerow(
            [
                r.id,
                r.name,
                r.age,
                f"{r.height:.1f}",
                f"{r.weight:.1f}",
                f"{r.bmi:.1f}",
                r.bmi_category,
                r.created_at.isoformat() if r.created_at else "",
            ]
        )
    output.seek(0)

    headers = {
        "Content-Disposition": 'attachment; filename="health_records_export.csv"'
    }
    return StreamingResponse(output, media_type="text/csv", headers=headers)


@app.get(
    "/api/health-records/{record_id}",
    response_model=HealthRecord,
    responses=ERROR_RESPONSES,
)
def get_health_record(record_id: int, service: HealthRecordService = Depends(get_service)):
    return service.get_record(record_id)


@app.post(
    "/api/health-records",
    response_model=HealthRecordWithAnalysis,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    openapi_extra=RECORD_BODY,
)
def create_health_record(
    payload: Dict[str, Any] = Body(...),
    service: HealthRecordService = Depends(get_service),
):
    """
    JSON 接口：
    - 输入：{name, age, height, weight}
    - 输出：保存后的记录 + analysis {bmi, category, recommendation}
    """
    return service.create_record(payload)


@app.put(
    "/api/health-records/{record_id}",
    response_model=HealthRecordWithAnalysis,
    responses=ERROR_RESPONSES,
    openapi_extra=RECORD_BODY,
)
def update_health_record(
    record_id: int,
    payload: Dict[str, Any] = Body(...),
    service: HealthRecordService = Depends(get_service),
):
    """
    Full replacement of name / age / height / weight; BMI is recomputed.
    """
    return service.update_record(record_id, payload)


@app.delete(
    "/api/health-records/{record_id}",
    response_model=MessageResponse,
    responses=ERROR_RESPONSES,
)
def delete_health_record(record_id: int, service: HealthRecordService = Depends(get_service)):
    return service.delete_record(record_id)


@app.get(
    "/api/health-records/{record_id}/analysis",
    response_model=HealthAnalysis,
    responses=ERROR_RESPONSES,
)
def analyze_health_record(record_id: int, service: HealthRecordService = Depends(get_service)):
    """
    BMI + category + recommendation + health status + ideal weight range,
    from the values stored with the record.
    """
    return service.analyze_record(record_id)


if __name__ == "__main__":
    import uvicorn

    logger.info("Server running on port %s", config.PORT)
    uvicorn.run(app, host=config.HOST, port=config.PORT)
