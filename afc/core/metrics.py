"""
Prometheus metrics shared by the API and the background jobs
"""

from prometheus_client import Counter, Histogram, Gauge

REQUEST_COUNT = Counter('http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
REQUEST_DURATION = Histogram('http_request_duration_seconds', 'HTTP request duration', ['method', 'endpoint'])
ACTIVE_CONNECTIONS = Gauge('http_active_connections', 'Number of active HTTP connections')
FINALIZATION_COUNT = Counter('contest_finalizations_total', 'Contest finalization attempts', ['outcome'])
REACTION_COUNT = Counter('reactions_total', 'Reaction ledger writes', ['action'])
SWEEP_DURATION = Histogram('contest_sweep_duration_seconds', 'Duration of one auto-finalization sweep')
