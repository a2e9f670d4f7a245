from prometheus_client import Counter, Histogram, Info as PrometheusInfo
from prometheus_fastapi_instrumentator import Instrumentator, metrics
import time
from fastapi import FastAPI
from functools import wraps

from glownexa.core.config import settings

# Contact relay metrics
contact_messages_total = Counter(
    'contact_messages_total',
    'Contact form messages handed to the SMTP transport',
    ['status']  # sent/failed
)

contact_rejections_total = Counter(
    'contact_rejections_total',
    'Contact form submissions rejected before sending',
    ['reason']  # missing_fields/invalid_email/rate_limited
)

# Media metrics
media_uploads_total = Counter(
    'media_uploads_total',
    'Image uploads forwarded to the media host',
    ['status']
)

# Analysis records
analyses_saved_total = Counter(
    'analyses_saved_total',
    'Analysis records stored',
    ['analysis_type']  # skin/hair
)

# Database metrics
db_operations = Counter(
    'mongodb_operations_total',
    'Total MongoDB operations',
    ['operation', 'collection', 'status']
)

db_operation_duration = Histogram(
    'mongodb_operation_duration_seconds',
    'Duration of MongoDB operations',
    ['operation', 'collection']
)

# App info
app_info = PrometheusInfo('app_info', 'Application information')
app_info.info({
    'version': settings.APP_VERSION,
    'name': settings.APP_NAME,
    'environment': 'development' if settings.DEBUG else 'production'
})

def setup_metrics(app: FastAPI) -> Instrumentator:
    """
    Set up Prometheus metrics for FastAPI application
    """
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/metrics", "/health"],
    )

    instrumentator.add(
        metrics.latency(
            buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
        )
    )
    instrumentator.add(metrics.requests())

    return instrumentator

def track_db_operation(operation: str, collection: str):
    """
    Decorator to track MongoDB operations
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            status = "success"

            try:
                return func(*args, **kwargs)
            except Exception:
                status = "error"
                raise
            finally:
                duration = time.time() - start_time
                db_operations.labels(
                    operation=operation,
                    collection=collection,
                    status=status
                ).inc()
                db_operation_duration.labels(
                    operation=operation,
                    collection=collection
                ).observe(duration)

        return wrapper
    return decorator
