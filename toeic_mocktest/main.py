# toeic_mocktest/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import config
from .core.database import get_db_manager, close_db_manager
from .core.exceptions import MockTestError
from .core.utils import DateTimeUtils
from .api.routes import router

# Setup logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    logger.info("🚀 TOEIC Mock Test API starting...")

    try:
        # Validate configuration
        validation = config.validate()
        if not validation["valid"]:
            raise Exception(f"Configuration invalid: {validation['issues']}")

        logger.info("✅ Configuration validated")

        # Initialize database manager
        logger.info("🔄 Initializing database...")
        db_manager = get_db_manager()
        db_health = db_manager.validate_connection()

        if not db_health["overall"]:
            raise Exception(f"Database validation failed: {db_health}")

        logger.info(f"✅ Stores ready ({db_health['mode']})")

        from .services.test_service import get_test_service
        service_health = get_test_service().health_check()

        if service_health["status"] != "healthy":
            logger.warning(f"Test service health warning: {service_health}")

        logger.info("✅ All systems operational")
        logger.info(f"📊 Review ordering: {config.REVIEW_ORDERING}")
        logger.info(f"🧮 Graded question types: {', '.join(config.GRADED_QUESTION_TYPES)}")
        logger.info(f"⏱️ Finish re-stamps finishedAt: {config.FINISH_RESTAMPS_FINISHED_AT}")

    except Exception as e:
        logger.error(f"❌ Startup failed: {e}")
        raise Exception(f"Application startup failed: {e}")

    yield

    # Cleanup on shutdown
    logger.info("👋 Shutting down...")
    try:
        close_db_manager()
        logger.info("✅ Graceful shutdown completed")
    except Exception as e:
        logger.error(f"❌ Shutdown error: {e}")

# Create FastAPI application
app = FastAPI(
    title=config.API_TITLE,
    description=config.API_DESCRIPTION,
    version=config.API_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router)

# Exception handlers
@app.exception_handler(MockTestError)
async def mock_test_error_handler(request: Request, exc: MockTestError):
    """Typed errors from the stores and services"""
    logger.warning(f"{exc.title} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
            "type": "server_error"
        }
    )

# Health check endpoints
@app.get("/health")
async def health_check():
    """Comprehensive health check"""
    try:
        health_status = {
            "status": "healthy",
            "service": "toeic_mocktest_api",
            "version": config.API_VERSION,
            "timestamp": DateTimeUtils.now().isoformat()
        }

        try:
            from .services.test_service import get_test_service
            test_health = get_test_service().health_check()
            health_status["test_service"] = test_health["status"]
            health_status["submissions"] = test_health.get("submissions", 0)
        except Exception as e:
            health_status["test_service"] = "error"
            logger.warning(f"Test service health check failed: {e}")

        try:
            db_health = get_db_manager().validate_connection()
            health_status["database"] = "healthy" if db_health["overall"] else "degraded"
            health_status["mode"] = db_health["mode"]
        except Exception as e:
            health_status["database"] = "error"
            logger.warning(f"Database health check failed: {e}")

        return health_status

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "service": "toeic_mocktest_api",
                "error": str(e)
            }
        )

@app.get("/info")
async def api_info():
    """API information and capabilities"""
    return {
        "name": config.API_TITLE,
        "version": config.API_VERSION,
        "description": config.API_DESCRIPTION,
        "features": {
            "autosave": True,
            "section_scores": True,
            "review": True,
            "mongodb_integration": not config.USE_DUMMY_DATA
        },
        "configuration": {
            "review_ordering": config.REVIEW_ORDERING,
            "graded_question_types": config.GRADED_QUESTION_TYPES,
            "finish_restamps_finished_at": config.FINISH_RESTAMPS_FINISHED_AT,
            "max_choice_length": config.MAX_CHOICE_LENGTH
        },
        "endpoints": {
            "list_tests": "GET /api/mocktests",
            "get_test": "GET /api/mocktests/{test_id}",
            "start_test": "POST /api/mocktests/{test_id}/start",
            "get_submission": "GET /api/mocktests/{test_id}/submission",
            "record_answer": "POST /api/mocktests/{test_id}/answer",
            "finish_test": "POST /api/mocktests/{test_id}/finish",
            "review": "GET /api/mocktests/{test_id}/review",
            "admin_tests": "GET /api/mocktests/admin/list",
            "admin_results": "GET /api/mocktests/admin/results",
            "admin_result_detail": "GET /api/mocktests/admin/results/{submission_id}",
            "health": "GET /health",
            "docs": "GET /docs"
        }
    }

if __name__ == "__main__":
    import uvicorn

    logger.info("🚀 Starting TOEIC Mock Test API")
    logger.info(f"🌐 Server: http://{config.API_HOST}:{config.API_PORT}")
    logger.info(f"📚 Docs: http://{config.API_HOST}:{config.API_PORT}/docs")

    uvicorn.run(
        "toeic_mocktest.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        reload=config.DEBUG_MODE,
        log_level=config.LOG_LEVEL.lower(),
        access_log=config.DEBUG_MODE
    )
