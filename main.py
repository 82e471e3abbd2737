"""
FastAPI application for the query assembler.
Renders JSON query descriptions to $N-parameterized SQL. Never executes SQL.
"""

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional
import uvicorn
import logging
import time
from datetime import datetime

from query_assembler import (
    AssemblerValidator,
    PlaceholderNumbering,
    QueryRequest
)
from config import APP_CONFIG, ASSEMBLER_CONFIG, LOG_CONFIG


# Configure logging
logging.basicConfig(
    level=LOG_CONFIG["level"],
    format=LOG_CONFIG["format"],
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=APP_CONFIG["name"],
    description="Fluent SELECT assembler with positional $N placeholders",
    version=APP_CONFIG["version"],
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if APP_CONFIG["debug"] else [
        "http://localhost:3000",
        "http://localhost:8000"
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Execution-Time"]
)

# Initialize services
validator = AssemblerValidator()
DEFAULT_NUMBERING = PlaceholderNumbering(ASSEMBLER_CONFIG["placeholder_numbering"])


# Middleware to add request ID and timing
@app.middleware("http")
async def add_process_time_header(request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Execution-Time"] = str(round(process_time * 1000, 2))
    response.headers["X-Request-ID"] = f"req_{int(start_time * 1000)}"
    return response


@app.get("/")
async def root():
    """Service banner."""
    return {
        "name": APP_CONFIG["name"],
        "version": APP_CONFIG["version"],
        "endpoints": {
            "build": "POST /build",
            "validate": "POST /validate",
            "health": "GET /health",
            "docs": "GET /docs"
        }
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": APP_CONFIG["version"],
        "placeholder_numbering": DEFAULT_NUMBERING.value,
        "validate_by_default": ASSEMBLER_CONFIG["validate_by_default"]
    }


@app.post("/build")
async def build_query(
    request: QueryRequest,
    numbering: Optional[PlaceholderNumbering] = Query(None, description="Placeholder numbering mode"),
    validate: Optional[bool] = Query(None, description="Reject queries that fail validation")
):
    """
    Render a structured query to SQL and positional arguments.

    Example:
    {
        "table": "users",
        "fields": ["id", "name"],
        "where": [{"field": "age", "operator": ">", "value": 18}],
        "or_where": [{"field": "status", "operator": "=", "value": "active"}]
    }
    """
    start_time = time.time()
    numbering = numbering or DEFAULT_NUMBERING
    if validate is None:
        validate = ASSEMBLER_CONFIG["validate_by_default"]

    try:
        logger.info(
            f"Building query on {request.table}: {len(request.fields)} fields, "
            f"{len(request.where) + len(request.or_where)} conditions, {len(request.ctes)} CTEs"
        )

        assembler = request.to_assembler()

        if validate:
            validation_errors = validator.validate(assembler, numbering)
            if validation_errors:
                logger.warning(f"Validation failed for {request.table}: {validation_errors}")
                raise HTTPException(
                    status_code=400,
                    detail={
                        "message": "Query validation failed",
                        "errors": validation_errors
                    }
                )

        sql, args = assembler.build_query(numbering)
        total_time = time.time() - start_time

        return {
            "success": True,
            "sql": sql,
            "args": args,
            "metadata": {
                "placeholders": len(args),
                "numbering": numbering.value,
                "ctes": [cte.name for cte in request.ctes],
                "joins": len(request.joins),
                "render_time_ms": round(total_time * 1000, 2)
            }
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error building query on {request.table}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Query build failed: {str(e)}"
        )


@app.post("/validate")
async def validate_query(
    request: QueryRequest,
    numbering: Optional[PlaceholderNumbering] = Query(None, description="Placeholder numbering mode")
):
    """Validate a structured query without rejecting it."""
    numbering = numbering or DEFAULT_NUMBERING
    errors = validator.validate(request.to_assembler(), numbering)
    if errors:
        logger.info(f"Query on {request.table} has {len(errors)} validation error(s)")
    return {
        "valid": not errors,
        "errors": errors
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=APP_CONFIG["host"],
        port=APP_CONFIG["port"],
        reload=APP_CONFIG["debug"]
    )
