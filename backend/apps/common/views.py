from django.http import JsonResponse
from django.core.cache import cache
import time
import os

import redis

from .http import ServiceClient, ServiceConfig
from .logger import get_logger

logger = get_logger(__name__).bind(component='common', layer='health')

_CACHE_PROBE_KEY = 'health:probe'


def _redis_ping(url: str, timeout: float = 0.3):
    try:
        client = redis.from_url(url, socket_connect_timeout=timeout, socket_timeout=timeout)
        pong = client.ping()
        result = {'status': 'ok' if pong else 'fail'}
        if result['status'] == 'ok':
            logger.debug('Redis health check succeeded')
        else:
            logger.warning('Redis health check returned unexpected response')
        return result
    except redis.RedisError as e:
        logger.warning('Redis health check failed', error=str(e))
        return {'status': 'fail', 'error': str(e)}


def _cache_check():
    """Round-trip a value through the configured cache backend."""
    started = time.time()
    try:
        cache.set(_CACHE_PROBE_KEY, 'ok', timeout=5)
        value = cache.get(_CACHE_PROBE_KEY)
    except Exception as e:  # backend misconfiguration surfaces here
        logger.error('Cache health check failed unexpectedly', error=str(e), exception=e.__class__.__name__)
        return {'status': 'fail', 'error': str(e), 'exception': e.__class__.__name__}
    latency = round((time.time() - started) * 1000, 2)
    if value != 'ok':
        # django-redis ignores exceptions, so an outage reads back as a miss
        logger.warning('Cache health check read back nothing', latency_ms=latency)
        return {'status': 'degraded', 'latency_ms': latency}
    return {'status': 'ok', 'latency_ms': latency}


def _service_check(name: str, url_setting: str):
    client = ServiceClient(ServiceConfig.from_settings(name, url_setting))
    result = client.ping()
    if result['status'] == 'ok':
        logger.debug('Service health check succeeded', service=name, latency_ms=result.get('latency_ms'))
    else:
        logger.warning('Service health check failed', service=name, error=result.get('error'))
    return result


def live_health(request):
    """Liveness probe: process is up and can service requests."""
    logger.debug('Liveness probe served')
    return JsonResponse({'status': 'alive'})


def ready_health(request):
    """Readiness probe: verifies the product and auth services plus the cache."""
    checks = {
        'product_service': _service_check('product-service', 'PRODUCT_SERVICE_URL'),
        'auth_service': _service_check('auth-service', 'AUTH_SERVICE_URL'),
        'cache': _cache_check(),
    }

    redis_url = os.getenv('REDIS_URL')
    if redis_url:
        checks['redis'] = _redis_ping(redis_url)
    else:
        checks['redis'] = {'status': 'skipped', 'detail': 'REDIS_URL not set'}

    failing = [name for name, r in checks.items() if r.get('status') == 'fail']
    overall_status = 'ok' if not failing else 'degraded'
    http_status = 200 if not failing else 503
    payload = {
        'status': overall_status,
        'checks': checks,
    }
    logger.info('Readiness probe evaluated', status=overall_status, failing_components=failing)
    return JsonResponse(payload, status=http_status)
