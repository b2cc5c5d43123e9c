"""
Centralized constants for the PDF Translation Pipeline.
All tunables used by the orchestrator and its collaborators.
"""

# ===========================================
# PIPELINE
# ===========================================
PIPELINE_UNIT_SIZE_PAGES = 20         # pages grouped into one work unit
PIPELINE_CONCURRENCY_LIMIT = 3        # units in flight per batch
PIPELINE_TASK_TIMEOUT_MS = 60000      # per remote call
PIPELINE_MAX_ATTEMPTS = 2             # attempts per unit (first try included)
PIPELINE_RUN_DEADLINE_MS = 290000     # hard wall-clock budget for one run
PIPELINE_ADMISSION_MARGIN_MS = 0      # stop admitting this long before the deadline

# ===========================================
# RETRY
# ===========================================
RETRY_BASE_DELAY_MS = 800             # backoff = base * 2^(attempt-1) + jitter
RETRY_JITTER_MS = 200                 # upper bound of random jitter

# ===========================================
# CHUNKING
# ===========================================
CHUNK_MAX_CHARS = 3000                # character-budget mode
PAGE_SEPARATOR = "\n\n"               # joins pages inside one unit

# ===========================================
# TRANSLATION
# ===========================================
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_SOURCE_LANG = "English"
DEFAULT_TARGET_LANG = "Russian"
TRANSLATION_MAX_TOKENS = 8192         # output cap per request (anthropic requires one)
CHARS_PER_TOKEN = 4                   # rough usage estimate

# ===========================================
# PROGRESS
# ===========================================
HEARTBEAT_INTERVAL_SECONDS = 10.0
PROGRESS_BUFFER_SIZE = 256            # events buffered before emit() suspends

# ===========================================
# FILE HANDLING
# ===========================================
MAX_UPLOAD_SIZE_MB = 25
ALLOWED_UPLOAD_TYPES = ["application/pdf"]
UPLOADS_PREFIX = "uploads"
RESULTS_PREFIX = "results"
RETENTION_HOURS = 24
DOCX_CONTENT_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)

# ===========================================
# API / SERVER
# ===========================================
TRANSLATE_RATE_LIMIT = "10/minute"    # per client IP

# ===========================================
# LOGGING
# ===========================================
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = 'logs/pipeline.log'
LOG_MAX_SIZE_MB = 10
LOG_BACKUP_COUNT = 5
