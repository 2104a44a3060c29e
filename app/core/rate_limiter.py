from slowapi import Limiter
from slowapi.util import get_remote_address
from app.core.config import settings
from loguru import logger

# ----------------------------------------------------------------
# 1. CLIENT IP IDENTIFICATION
# ----------------------------------------------------------------
def get_real_ip(request):
    """
    Client IP behind proxies.
    Checks X-Forwarded-For first, then X-Real-IP, then the socket peer.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Leftmost entry is the original client
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)


# ----------------------------------------------------------------
# 2. STORAGE SELECTION
# ----------------------------------------------------------------
storage_uri = settings.REDIS_URL

if storage_uri and storage_uri.startswith("redis://") and settings.ENV == "prod":
    # Managed Redis in production is TLS only
    storage_uri = storage_uri.replace("redis://", "rediss://", 1)


# ----------------------------------------------------------------
# 3. INITIALIZE LIMITER WITH FAIL-OVER
# ----------------------------------------------------------------
try:
    if storage_uri:
        logger.info("⚡ Initializing Rate Limiter with Redis Storage")
        limiter = Limiter(
            key_func=get_real_ip,
            storage_uri=storage_uri,
            strategy="fixed-window",
            storage_options={"socket_connect_timeout": 5, "retry_on_timeout": True},
        )
    else:
        logger.info("REDIS_URL not set, using in-memory rate limiting")
        limiter = Limiter(key_func=get_real_ip)

except Exception as e:
    logger.error(f"❌ Failed to configure Redis rate limiting: {e}")
    limiter = Limiter(key_func=get_real_ip)
