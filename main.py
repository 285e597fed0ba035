"""
FastAPI应用主入口
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from api.routes import chat as chat_routes
from api.routes import moderation as moderation_routes
from api.routes import profile as profile_routes
from api.routes import ws as ws_routes
from api.middleware import RequestIDMiddleware, LoggingMiddleware
from core.config import settings
from core.exceptions import register_exception_handlers
from core.response import success_response
from core.logging_config import get_logger, configure_logging
from infrastructure.database import create_tables, dispose_engine
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork
from application.ports.moderation import UnitOfWorkBlockLookup
from application.ports.realtime import RealtimeBrokerPort
from application.services.chat_relay import ChatRelay
from application.services.notification_service import NotificationBroadcaster
from application.services.presence import PresenceDirectory
from application.services.realtime_service import RealtimeService
from infrastructure.realtime.connection_manager import ConnectionManager
from infrastructure.realtime.brokers import InMemoryRealtimeBroker, RedisRealtimeBroker


# 初始化日志：在入口处显式配置，避免模块导入时的副作用
configure_logging()
logger = get_logger(__name__)


def select_broker() -> RealtimeBrokerPort:
    """根据 REALTIME_BROKER 选择 Broker：auto -> redis(if url) else inmemory"""
    provider = (settings.REALTIME_BROKER or "auto").lower()
    if provider in ("redis", "auto"):
        if settings.redis.url:
            logger.info("realtime_broker_selected", provider="redis")
            return RedisRealtimeBroker()
        if provider == "redis":
            logger.warning("realtime_broker_redis_missing_url", message="REDIS__URL not set, falling back to in-memory broker")
    logger.info("realtime_broker_selected", provider="inmemory")
    return InMemoryRealtimeBroker()


async def init_realtime(app: FastAPI, broker: RealtimeBrokerPort) -> RealtimeService:
    """装配在线目录、连接管理、消息转发与通知广播，并挂到 app.state"""
    broadcaster = NotificationBroadcaster(broker)
    relay = ChatRelay(
        block_lookup=UnitOfWorkBlockLookup(SQLAlchemyUnitOfWork),
        broadcaster=broadcaster,
        on_store_error=settings.MODERATION_ON_STORE_ERROR,
    )
    conn_mgr = ConnectionManager()
    realtime = RealtimeService(presence=PresenceDirectory(), connections=conn_mgr, relay=relay)
    await broker.subscribe(realtime.on_broker_event)
    app.state.realtime_broker = broker
    app.state.realtime_connections = conn_mgr
    app.state.realtime_service = realtime
    app.state.notification_broadcaster = broadcaster
    return realtime


async def shutdown_realtime(app: FastAPI) -> None:
    conn_mgr = getattr(app.state, "realtime_connections", None)
    if conn_mgr is not None:
        await conn_mgr.aclose()
    broker = getattr(app.state, "realtime_broker", None)
    if broker is not None:
        try:
            await broker.aclose()
        except Exception as exc:
            logger.warning("realtime_broker_close_failed", error=str(exc))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时创建数据库表（仅开发环境）。生产应使用 Alembic 迁移
    if settings.DEBUG:
        await create_tables()
        logger.info("database_initialized", message="Database tables created (development)")
    else:
        logger.info(
            "database_migrations_required",
            message="No auto-create in production, use Alembic migrations (alembic upgrade head)"
        )

    # 初始化实时通信（WebSocket）
    try:
        await init_realtime(app, select_broker())
        logger.info("realtime_initialized", on_store_error=settings.MODERATION_ON_STORE_ERROR)
    except Exception as exc:
        logger.error("realtime_init_failed", error=str(exc), exc_info=True)

    yield

    await shutdown_realtime(app)
    await dispose_engine()
    logger.info("application_shutdown", message="Application shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="实时聊天转发服务：在线目录、屏蔽校验与通知广播",
)

# 添加中间件（注意顺序：从下往上执行）
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册全局异常处理器
register_exception_handlers(app)


# 注册路由
app.include_router(chat_routes.router, prefix="/api/v1")
app.include_router(moderation_routes.router, prefix="/api/v1")
app.include_router(profile_routes.router, prefix="/api/v1")
app.include_router(ws_routes.router, prefix="/api/v1")


# 根路径
@app.get("/", tags=["Root"])
async def root():
    """API根路径"""
    return success_response(
        data={
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": "/docs",
            "redoc": "/redoc"
        },
        message="Welcome"
    )


# 健康检查
@app.get("/health", tags=["Health"])
async def health_check():
    """健康检查端点"""
    realtime = getattr(app.state, "realtime_service", None)
    return success_response(
        data={
            "status": "healthy",
            "realtime": realtime is not None,
            "online_users": len(realtime.presence) if realtime else 0,
        },
        message="ok",
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
