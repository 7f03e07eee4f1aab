import time
import logging
from typing import Dict, Any, Optional, Tuple
from datetime import datetime, timedelta, timezone

from crop_advisor.config import CACHE_TABLE, CACHE_TTL, LAST_PREDICTION_TTL, MAX_CACHE_SIZE
from crop_advisor.services.services import supabase_client

logger = logging.getLogger(__name__)

# In-memory fallback when Supabase is not configured: key -> (expires_at, value)
_memory_cache: Dict[str, Tuple[float, Any]] = {}


def get_cache_key(prefix: str, key: str) -> str:
    """Generate cache key with prefix"""
    return f"{prefix}:{key}"


def _memory_get(full_key: str) -> Optional[Any]:
    entry = _memory_cache.get(full_key)
    if not entry:
        return None
    expires_at, value = entry
    if expires_at < time.time():
        _memory_cache.pop(full_key, None)
        return None
    return value


def _purge_expired(now: float) -> int:
    expired = [k for k, (expires_at, _) in _memory_cache.items() if expires_at < now]
    for k in expired:
        _memory_cache.pop(k, None)
    return len(expired)


def _memory_set(full_key: str, data: Any, ttl: int):
    now = time.time()
    # Re-inserting moves the key to the newest position
    _memory_cache.pop(full_key, None)
    if len(_memory_cache) >= MAX_CACHE_SIZE:
        _purge_expired(now)
    while _memory_cache and len(_memory_cache) >= MAX_CACHE_SIZE:
        # Evict the least recently written entry
        _memory_cache.pop(next(iter(_memory_cache)))
    _memory_cache[full_key] = (now + ttl, data)


async def get_from_cache(cache_type: str, key: str) -> Optional[Any]:
    """Get item from Supabase cache (or the in-memory fallback)"""
    full_key = get_cache_key(cache_type, key)
    try:
        if not supabase_client:
            return _memory_get(full_key)

        result = supabase_client.table(CACHE_TABLE)\
            .select('value, expires_at')\
            .eq('key', full_key)\
            .gt('expires_at', datetime.now(timezone.utc).isoformat())\
            .execute()

        if result.data:
            logger.info(f"✓ Cache hit: {full_key[:50]}")
            return result.data[0]['value']

        return None
    except Exception as e:
        logger.error(f"Cache get error: {e}")
        return None


async def set_to_cache(cache_type: str, key: str, data: Any, ttl: int = CACHE_TTL):
    """Set item to Supabase cache (or the in-memory fallback)"""
    full_key = get_cache_key(cache_type, key)
    try:
        if not supabase_client:
            _memory_set(full_key, data, ttl)
            return

        expires_at = (datetime.now(timezone.utc) + timedelta(seconds=ttl)).isoformat()

        supabase_client.table(CACHE_TABLE).upsert({
            'key': full_key,
            'value': data,
            'expires_at': expires_at
        }).execute()

        logger.info(f"✓ Cache set: {full_key[:50]}")
    except Exception as e:
        logger.error(f"Cache set error: {e}")


# ============================================================================
# Last prediction per user (offline fallback)
# ============================================================================

async def save_last_prediction(user_id: str, prediction: Dict[str, Any]):
    await set_to_cache("prediction", user_id, prediction, ttl=LAST_PREDICTION_TTL)


async def get_last_prediction(user_id: str) -> Optional[Dict[str, Any]]:
    return await get_from_cache("prediction", user_id)


# ============================================================================
# Cleanup & Stats
# ============================================================================

async def cleanup_expired_cache():
    """Clean up expired cache entries"""
    try:
        if not supabase_client:
            removed = _purge_expired(time.time())
            if removed:
                logger.info(f"Cache cleanup: removed {removed} expired entries")
            return

        result = supabase_client.table(CACHE_TABLE)\
            .delete()\
            .lt('expires_at', datetime.now(timezone.utc).isoformat())\
            .execute()

        if result.data:
            logger.info(f"Cache cleanup: removed {len(result.data)} expired entries")
    except Exception as e:
        logger.error(f"Cache cleanup error: {e}")


async def get_cache_stats() -> dict:
    """Get cache statistics"""
    try:
        if not supabase_client:
            return {
                "total_cache_items": len(_memory_cache),
                "storage": "In-memory"
            }

        result = supabase_client.table(CACHE_TABLE).select('key', count='exact').execute()
        total = result.count if result.count is not None else 0

        return {
            "total_cache_items": total,
            "storage": "Supabase (Persistent)"
        }
    except Exception as e:
        logger.error(f"Error getting cache stats: {e}")
        return {"error": str(e)}
